"""
Replay Memory - Fixed-capacity store of past transitions.

Experience replay breaks the correlation between consecutive samples,
leading to more stable and efficient learning.
"""
import random
from collections import deque
from typing import Iterator, List, Optional

from .transition import Transition
from ..utils.config_loader import ConfigurationError


class ReplayMemory:
    """
    Fixed-size FIFO buffer of transitions with uniform random sampling.

    Once full, every push evicts the oldest transition. Sampling never
    removes anything. Not thread-safe.
    """

    def __init__(
        self,
        capacity: int = 2000,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize the replay memory.

        Args:
            capacity: Maximum number of transitions to store
            rng: Random source used for sampling (takes precedence over seed)
            seed: Seed for a private random source, for reproducible sampling
        """
        if capacity <= 0:
            raise ConfigurationError(f"Replay capacity must be positive, got {capacity}")

        self.capacity = capacity
        self.buffer: deque = deque(maxlen=capacity)
        self._rng = rng if rng is not None else random.Random(seed)

    def push(self, transition: Transition):
        """Add a transition, evicting the oldest one when full."""
        self.buffer.append(transition)

    def sample(self, batch_size: int) -> List[Transition]:
        """
        Sample distinct transitions uniformly, without replacement.

        Args:
            batch_size: Number of transitions to sample

        Returns:
            List of batch_size transitions
        """
        assert batch_size <= len(self.buffer), (
            f"Cannot sample {batch_size} transitions from {len(self.buffer)} stored"
        )
        return self._rng.sample(self.buffer, batch_size)

    @property
    def storage_size(self) -> int:
        """Number of transitions currently stored."""
        return len(self.buffer)

    def is_ready(self, batch_size: int) -> bool:
        """Check if memory has enough transitions for a batch."""
        return len(self.buffer) >= batch_size

    def clear(self):
        self.buffer.clear()

    def __len__(self) -> int:
        return len(self.buffer)

    def __iter__(self) -> Iterator[Transition]:
        """Iterate oldest to newest."""
        return iter(self.buffer)
