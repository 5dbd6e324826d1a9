from .transition import Transition
from .replay_memory import ReplayMemory
from .error_stats import EpisodeErrorStats, RunningErrorStats
from .target_sync import (
    Disabled,
    EpisodeEnd,
    HardPeriodic,
    Soft,
    TargetSyncPolicy,
    resolve_sync_policy,
)
from .dqn_network import DQNNetwork
from .torch_approximator import TorchApproximator
from .dqn_agent import DQNAgent, create_agent

__all__ = [
    "Transition",
    "ReplayMemory",
    "EpisodeErrorStats",
    "RunningErrorStats",
    "Disabled",
    "EpisodeEnd",
    "HardPeriodic",
    "Soft",
    "TargetSyncPolicy",
    "resolve_sync_policy",
    "DQNNetwork",
    "TorchApproximator",
    "DQNAgent",
    "create_agent",
]
