"""
DQN Agent - Deep Q-Learning agent with experience replay.
"""
import logging
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import torch

from .error_stats import EpisodeErrorStats, RunningErrorStats
from .replay_memory import ReplayMemory
from .target_sync import EpisodeEnd, HardPeriodic, Soft, TargetSyncPolicy
from .torch_approximator import TorchApproximator
from .transition import Transition
from ..core.approximator_interface import FunctionApproximator
from ..core.diagnostics_interface import DiagnosticsSink, NullDiagnosticsSink
from ..device.device_manager import DeviceManager
from ..utils.config_loader import AgentConfig, Config, ConfigurationError
from ..visualization.error_display import create_diagnostics_sink

logger = logging.getLogger(__name__)

ERROR_SERIES = "error"
ERROR_MOVING_AVG_SERIES = "error_moving_avg"


def _action_index(action) -> int:
    """Accept an int or a single-element action array."""
    return int(np.asarray(action).reshape(-1)[0])


class DQNAgent:
    """
    Deep Q-Network Agent.

    Features:
    - Greedy action selection (exploration is left to the caller)
    - Experience replay with a fixed-capacity memory
    - Optional target network with hard, soft or per-episode sync
    - Batched Bellman updates that only move the Q-value of the taken action
    - Per-episode TD error statistics sent to a diagnostics sink
    """

    def __init__(
        self,
        input_shape: Tuple[int, ...],
        num_actions: int,
        learning_rate: float = 0.001,
        discount_factor: float = 0.95,
        replay_size: int = 2000,
        batch_size: int = 32,
        hidden_layers: Sequence[int] = (24, 24),
        training_epochs: int = 1,
        memory_interval: int = 1,
        target_update_interval: float = 0.0,
        target_update_on_episode_end: bool = False,
        approximator: Optional[FunctionApproximator] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        error_window: int = 100,
        device: Optional[torch.device] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the DQN agent.

        Args:
            input_shape: Shape of a single state
            num_actions: Number of possible actions
            learning_rate: Learning rate of the default approximator
            discount_factor: Discount applied to bootstrapped future values
            replay_size: Replay memory capacity
            batch_size: Transitions per training batch
            hidden_layers: Hidden layer sizes of the default approximator
            training_epochs: Passes over each training batch
            memory_interval: Store a transition every N global steps
            target_update_interval: >= 1 hard sync period (truncated to whole
                steps, so 2.7 syncs every 2), (0, 1) soft blend, 0 disabled
            target_update_on_episode_end: Sync the target network at episode end instead
            approximator: Q-value approximator (default: TorchApproximator)
            diagnostics: Sink for per-episode error series
            error_window: Episodes in the error moving average
            device: PyTorch device for the default approximator
            rng: Random source for replay sampling

        Raises:
            ConfigurationError: If any setting is invalid
        """
        self.config = AgentConfig(
            learning_rate=learning_rate,
            discount_factor=discount_factor,
            replay_size=replay_size,
            batch_size=batch_size,
            training_epochs=training_epochs,
            memory_interval=memory_interval,
            target_update_interval=target_update_interval,
            target_update_on_episode_end=target_update_on_episode_end,
            hidden_layers=list(hidden_layers),
        )
        self.config.validate()
        if num_actions <= 0:
            raise ConfigurationError(f"num_actions must be positive, got {num_actions}")

        self.input_shape = tuple(input_shape)
        self.num_actions = num_actions
        self.discount_factor = discount_factor
        self.batch_size = batch_size
        self.training_epochs = training_epochs
        self.memory_interval = memory_interval
        self._sync_policy = self.config.sync_policy()

        if approximator is None:
            approximator = TorchApproximator(
                self.input_shape,
                num_actions,
                learning_rate=learning_rate,
                hidden_layers=hidden_layers,
                device=device
            )
        self._approximator = approximator
        self._target_approximator: Optional[FunctionApproximator] = None
        if self._sync_policy.uses_target:
            self._target_approximator = self._approximator.clone()

        self._memory = ReplayMemory(replay_size, rng=rng)
        self._diagnostics = diagnostics if diagnostics is not None else NullDiagnosticsSink()

        # Training statistics
        self._episode_stats = EpisodeErrorStats.empty()
        self._error_stats = RunningErrorStats(error_window)

        logger.debug(
            "DQN agent ready: input_shape=%s actions=%d sync=%s",
            self.input_shape, num_actions, self._sync_policy
        )

    @classmethod
    def from_config(
        cls,
        input_shape: Tuple[int, ...],
        num_actions: int,
        config: AgentConfig,
        **kwargs: Any
    ) -> "DQNAgent":
        """
        Create an agent from an AgentConfig.

        Args:
            input_shape: Shape of a single state
            num_actions: Number of possible actions
            config: Agent hyperparameters
            **kwargs: Collaborators (approximator, diagnostics, device, rng, ...)
        """
        return cls(
            input_shape,
            num_actions,
            learning_rate=config.learning_rate,
            discount_factor=config.discount_factor,
            replay_size=config.replay_size,
            batch_size=config.batch_size,
            hidden_layers=config.hidden_layers,
            training_epochs=config.training_epochs,
            memory_interval=config.memory_interval,
            target_update_interval=config.target_update_interval,
            target_update_on_episode_end=config.target_update_on_episode_end,
            **kwargs
        )

    @property
    def approximator(self) -> FunctionApproximator:
        return self._approximator

    @property
    def target_approximator(self) -> Optional[FunctionApproximator]:
        return self._target_approximator

    @property
    def memory(self) -> ReplayMemory:
        return self._memory

    @property
    def diagnostics(self) -> DiagnosticsSink:
        return self._diagnostics

    @property
    def sync_policy(self) -> TargetSyncPolicy:
        return self._sync_policy

    @property
    def episode_stats(self) -> EpisodeErrorStats:
        return self._episode_stats

    @property
    def error_stats(self) -> RunningErrorStats:
        return self._error_stats

    @property
    def trainings_done(self) -> int:
        return self._episode_stats.trainings_done

    @property
    def per_episode_error_avg(self) -> float:
        return self._episode_stats.per_episode_error_avg

    def get_optimal_action(self, state: np.ndarray) -> np.ndarray:
        """
        Select the greedy action.

        Args:
            state: Current state

        Returns:
            Single-element array holding the best action index
        """
        q_values = self._approximator.predict(np.expand_dims(np.asarray(state), 0))
        best = self._approximator.batch_argmax(q_values)[0]
        return np.array([best], dtype=np.int64)

    def on_step(
        self,
        step: int,
        global_step: int,
        state: np.ndarray,
        action,
        reward: float,
        next_state: np.ndarray,
        done: bool
    ):
        """
        Record a transition and sync the target network if due.

        Args:
            step: Step within the current episode
            global_step: Step count across all episodes
            state: State before the action
            action: Action taken (int or single-element array)
            reward: Reward received
            next_state: State after the action
            done: Whether the episode ended

        Raises:
            ValueError: If the action is outside [0, num_actions)
        """
        action = _action_index(action)
        if not 0 <= action < self.num_actions:
            raise ValueError(
                f"Action must be in [0, {self.num_actions}), got {action}"
            )

        if global_step % self.memory_interval == 0:
            self._memory.push(Transition(
                state, action, float(reward), next_state, bool(done)
            ))

        policy = self._sync_policy
        if isinstance(policy, HardPeriodic):
            if global_step % policy.steps == 0:
                self._approximator.copy_parameters_to(self._target_approximator)
                logger.debug("Hard target sync at global step %d", global_step)
        elif isinstance(policy, Soft):
            self._approximator.soft_copy_parameters_to(self._target_approximator, policy.blend)

    def on_train(self) -> Optional[float]:
        """
        Train on a sampled batch if the memory holds enough transitions.

        Returns:
            Average absolute TD error of the batch, None if no training happened
        """
        if not self._memory.is_ready(self.batch_size):
            return None

        return self.train(self._memory.sample(self.batch_size))

    def on_episode_end(self, episode: int):
        """
        Close the episode: sync if configured, publish and reset the error stats.

        Args:
            episode: Number of the episode that just ended
        """
        if isinstance(self._sync_policy, EpisodeEnd):
            self._approximator.copy_parameters_to(self._target_approximator)
            logger.debug("Target sync at end of episode %d", episode)

        error = self._episode_stats.per_episode_error_avg
        self._error_stats.add(error)
        moving_avg = self._error_stats.moving_average

        self._emit(episode, error, ERROR_SERIES)
        self._emit(episode, moving_avg, ERROR_MOVING_AVG_SERIES)

        logger.info(
            "Episode %d: error=%.6f avg(%d)=%.6f trainings=%d",
            episode, error, self._error_stats.window, moving_avg,
            self._episode_stats.trainings_done
        )

        self._episode_stats = EpisodeErrorStats.empty()

    def _emit(self, episode: int, value: float, series_id: str):
        """Send a point to the diagnostics sink; sink failures never stop training."""
        try:
            self._diagnostics.record(episode, value, series_id)
        except Exception:
            logger.warning(
                "Diagnostics sink failed to record %s for episode %d",
                series_id, episode, exc_info=True
            )

    def train(self, batch: List[Transition]) -> float:
        """
        Run one Bellman update on a batch of transitions.

        Targets are the approximator's own predictions with only the taken
        action's value replaced, so other actions add no loss.

        Args:
            batch: Transitions to learn from

        Returns:
            Average absolute TD error of the batch
        """
        states = np.stack([t.state for t in batch])
        next_states = np.stack([t.next_state for t in batch])
        actions = np.array([t.action for t in batch], dtype=np.int64)
        rewards = np.array([t.reward for t in batch], dtype=np.float64)
        dones = np.array([t.done for t in batch], dtype=bool)

        predicted = np.array(self._approximator.predict(states), dtype=np.float64)

        bootstrap_model = self._target_approximator
        if bootstrap_model is None:
            bootstrap_model = self._approximator
        bootstrap = bootstrap_model.predict(next_states)
        next_values = bootstrap_model.batch_max(bootstrap)

        targets = np.where(dones, rewards, rewards + self.discount_factor * next_values)

        rows = np.arange(len(batch))
        errors = targets - predicted[rows, actions]
        predicted[rows, actions] = targets

        self._approximator.fit(states, predicted, epochs=self.training_epochs, verbose=0)

        avg_batch_error = float(np.sum(np.abs(errors))) / len(batch)
        self._episode_stats = self._episode_stats.record(avg_batch_error)

        logger.debug(
            "Training %d: batch error=%.6f",
            self._episode_stats.trainings_done, avg_batch_error
        )
        return avg_batch_error

    def save_state(self, filepath: str):
        """Save the online approximator's parameters."""
        self._approximator.save(filepath)

    def load_state(self, filepath: str):
        """Load the online approximator's parameters."""
        self._approximator.load(filepath)

    def summary(self) -> str:
        """Get the approximator's parameter summary."""
        return self._approximator.summary()

    def close(self):
        """Close the diagnostics sink, stopping a running terminal display."""
        self._diagnostics.close()

    def __enter__(self) -> "DQNAgent":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_stats(self) -> Dict[str, Any]:
        """Get current training statistics."""
        return {
            "trainings_done": self._episode_stats.trainings_done,
            "per_episode_error_avg": self._episode_stats.per_episode_error_avg,
            "error_moving_avg": self._error_stats.moving_average,
            "episodes_recorded": self._error_stats.count,
            "memory_size": len(self._memory),
            "sync_policy": type(self._sync_policy).__name__,
        }


def create_agent(
    input_shape: Tuple[int, ...],
    num_actions: int,
    config: Config,
    **kwargs: Any
) -> DQNAgent:
    """
    Create an agent wired from a complete application config.

    The device comes from the device section and the diagnostics sink and
    error window from the diagnostics section, unless given in kwargs.

    Args:
        input_shape: Shape of a single state
        num_actions: Number of possible actions
        config: Loaded application configuration
        **kwargs: Overrides forwarded to DQNAgent

    Returns:
        Configured DQNAgent
    """
    if "device" not in kwargs and "approximator" not in kwargs:
        kwargs["device"] = DeviceManager.from_config(config.device).get_device()
    kwargs.setdefault("error_window", config.diagnostics.window)
    if "diagnostics" not in kwargs:
        kwargs["diagnostics"] = create_diagnostics_sink(config.diagnostics)

    return DQNAgent.from_config(input_shape, num_actions, config.agent, **kwargs)
