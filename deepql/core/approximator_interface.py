"""
Abstract function approximator interface for DeepQL.

The DQN agent only talks to its Q-value model through this interface,
so any model (PyTorch network, linear model, test double) can be plugged in.
"""

from abc import ABC, abstractmethod
import numpy as np


class FunctionApproximator(ABC):
    """
    Abstract Q-value function approximator.

    Maps a batch of states to a batch of Q-value rows, one value per action.
    """

    @abstractmethod
    def predict(self, states: np.ndarray) -> np.ndarray:
        """
        Predict Q-values for a batch of states.

        Args:
            states: Batch of states, shape (batch_size, *input_shape)

        Returns:
            Q-values, shape (batch_size, num_actions)
        """
        pass

    @abstractmethod
    def fit(
        self,
        states: np.ndarray,
        targets: np.ndarray,
        epochs: int = 1,
        verbose: int = 0
    ) -> None:
        """
        Fit the approximator on a single batch (blocking).

        Args:
            states: Batch of states
            targets: Regression targets, same shape as predict(states)
            epochs: Number of passes over the batch
            verbose: Verbosity level (0 = silent)
        """
        pass

    @abstractmethod
    def clone(self) -> "FunctionApproximator":
        """
        Create a structurally identical approximator.

        The clone owns its parameters; they start equal to this one's.
        """
        pass

    @abstractmethod
    def copy_parameters_to(self, other: "FunctionApproximator") -> None:
        """Hard copy this approximator's parameters into other."""
        pass

    @abstractmethod
    def soft_copy_parameters_to(
        self, other: "FunctionApproximator", blend: float
    ) -> None:
        """
        Move other's parameters a blend fraction toward this one's.

        other_param = other_param * (1 - blend) + this_param * blend
        """
        pass

    @abstractmethod
    def save(self, filepath: str) -> None:
        """Save parameters to file."""
        pass

    @abstractmethod
    def load(self, filepath: str) -> None:
        """Load parameters from file."""
        pass

    @abstractmethod
    def summary(self) -> str:
        """Get a human-readable summary of the parameters."""
        pass

    @staticmethod
    def batch_argmax(q_values: np.ndarray) -> np.ndarray:
        """Row-wise index of the best action."""
        return np.argmax(q_values, axis=1)

    @staticmethod
    def batch_max(q_values: np.ndarray) -> np.ndarray:
        """Row-wise best Q-value."""
        return np.max(q_values, axis=1)
