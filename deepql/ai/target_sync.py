"""
Target network sync policies.

The lagging (target) approximator is refreshed in one of four ways,
chosen once when the agent is built:

- Disabled: no target approximator, bootstrap from the online one
- HardPeriodic(steps): full parameter copy every `steps` global steps
- Soft(blend): every step, move `blend` of the way toward the online parameters
- EpisodeEnd: full parameter copy at every episode boundary
"""
import logging
import math
from dataclasses import dataclass
from typing import Union

from ..utils.config_loader import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Disabled:
    """No target approximator."""

    @property
    def uses_target(self) -> bool:
        return False


@dataclass(frozen=True)
class HardPeriodic:
    """Hard copy every `steps` global steps."""
    steps: int

    def __post_init__(self):
        if self.steps < 1:
            raise ConfigurationError(f"HardPeriodic steps must be >= 1, got {self.steps}")

    @property
    def uses_target(self) -> bool:
        return True


@dataclass(frozen=True)
class Soft:
    """Blend toward the online parameters on every step."""
    blend: float

    def __post_init__(self):
        if not 0.0 < self.blend < 1.0:
            raise ConfigurationError(f"Soft blend must be in (0, 1), got {self.blend}")

    @property
    def uses_target(self) -> bool:
        return True


@dataclass(frozen=True)
class EpisodeEnd:
    """Hard copy once per episode boundary."""

    @property
    def uses_target(self) -> bool:
        return True


TargetSyncPolicy = Union[Disabled, HardPeriodic, Soft, EpisodeEnd]


def resolve_sync_policy(
    interval: float = 0.0,
    sync_on_episode_end: bool = False
) -> TargetSyncPolicy:
    """
    Resolve the raw sync settings into a single policy.

    Precedence: episode-end flag, then interval >= 1 (hard), then
    interval in (0, 1) (soft), otherwise disabled.

    Args:
        interval: Hard copy period (>= 1) or soft blend factor (in (0, 1))
        sync_on_episode_end: Copy at every episode boundary instead

    Returns:
        The resolved policy

    Raises:
        ConfigurationError: If interval is negative or not finite
    """
    if not math.isfinite(interval) or interval < 0:
        raise ConfigurationError(f"Sync interval must be in [0, inf), got {interval}")

    if sync_on_episode_end:
        if interval > 0:
            logger.warning(
                "Target sync on episode end is enabled; ignoring sync interval %s",
                interval
            )
        return EpisodeEnd()

    if interval >= 1:
        return HardPeriodic(int(interval))

    if interval > 0:
        return Soft(float(interval))

    return Disabled()
