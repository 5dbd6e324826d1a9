"""
Core abstractions for DeepQL.

Provides the interfaces the agent depends on: the Q-value function
approximator and the diagnostics sink.
"""

from .approximator_interface import FunctionApproximator
from .diagnostics_interface import DiagnosticsSink, NullDiagnosticsSink

__all__ = [
    'FunctionApproximator',
    'DiagnosticsSink',
    'NullDiagnosticsSink',
]
