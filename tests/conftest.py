"""
Pytest configuration and fixtures for DeepQL tests.

Provides a small numpy linear approximator so agent behaviour can be
checked exactly without a neural network.
"""

import sys
from pathlib import Path

import numpy as np
import pytest


# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from deepql.core.approximator_interface import FunctionApproximator  # noqa: E402
from deepql.ai.transition import Transition  # noqa: E402


class LinearApproximator(FunctionApproximator):
    """
    Q(s) = flatten(s) @ weights, trained by one gradient step per epoch.

    Records every fit call as (states, targets, epochs, verbose).
    """

    def __init__(self, input_size, num_actions, weights=None, learning_rate=0.1):
        if weights is None:
            weights = np.zeros((input_size, num_actions))
        self.weights = np.array(weights, dtype=np.float64)
        self.input_size = input_size
        self.num_actions = num_actions
        self.learning_rate = learning_rate
        self.fit_calls = []
        self.predict_calls = 0

    def predict(self, states):
        self.predict_calls += 1
        states = np.asarray(states, dtype=np.float64).reshape(len(states), -1)
        return states @ self.weights

    def fit(self, states, targets, epochs=1, verbose=0):
        self.fit_calls.append((np.array(states), np.array(targets), epochs, verbose))
        x = np.asarray(states, dtype=np.float64).reshape(len(states), -1)
        for _ in range(epochs):
            residual = np.asarray(targets) - x @ self.weights
            self.weights = self.weights + self.learning_rate * x.T @ residual / len(x)

    def clone(self):
        return LinearApproximator(
            self.input_size, self.num_actions, self.weights.copy(), self.learning_rate
        )

    def copy_parameters_to(self, other):
        other.weights = self.weights.copy()

    def soft_copy_parameters_to(self, other, blend):
        other.weights = other.weights * (1 - blend) + self.weights * blend

    def save(self, filepath):
        np.save(filepath, self.weights)

    def load(self, filepath):
        self.weights = np.load(filepath)

    def summary(self):
        return f"LinearApproximator {self.weights.shape}"


@pytest.fixture
def linear_approximator():
    """Linear approximator over 3 state features and 2 actions, zero weights."""
    return LinearApproximator(3, 2)


@pytest.fixture
def make_transition():
    """Factory for transitions with 3-feature states."""
    def _make(index=0, action=0, reward=1.0, done=False, next_state=None):
        state = np.array([index, index + 1, index + 2], dtype=np.float64)
        if next_state is None:
            next_state = state + 1
        return Transition(state, action, reward, np.asarray(next_state, dtype=np.float64), done)
    return _make


@pytest.fixture
def sample_config():
    """Provide sample configuration for tests."""
    return {
        'agent': {
            'learning_rate': 0.01,
            'discount_factor': 0.99,
            'replay_size': 500,
            'batch_size': 16,
            'training_epochs': 2,
            'memory_interval': 1,
            'target_update_interval': 100,
            'target_update_on_episode_end': False,
            'hidden_layers': [32, 16],
        },
        'device': {
            'preferred': 'cpu',
            'force_cpu': True,
        },
        'logging': {
            'level': 'DEBUG',
        },
    }
