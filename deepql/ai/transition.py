"""
Transition - one recorded interaction step.
"""
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Transition:
    """Immutable (state, action, reward, next_state, done) experience tuple."""
    state: np.ndarray
    action: int
    reward: float
    next_state: np.ndarray
    done: bool
