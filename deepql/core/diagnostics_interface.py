"""
Abstract diagnostics sink interface for DeepQL.

Sinks receive (episode, value, series_id) points, e.g. the raw per-episode
TD error and its moving average.
"""

from abc import ABC, abstractmethod


class DiagnosticsSink(ABC):
    """
    Receiver for per-episode diagnostic values.

    Recording is fire-and-forget: the agent never waits on, or fails
    because of, a sink.
    """

    @abstractmethod
    def record(self, episode: int, value: float, series_id: str) -> None:
        """
        Record one point of a series.

        Args:
            episode: Episode number
            value: Value for this episode
            series_id: Name of the series (e.g. "error")
        """
        pass

    def close(self) -> None:
        """Release any resources held by the sink."""
        pass


class NullDiagnosticsSink(DiagnosticsSink):
    """Sink that discards everything."""

    def record(self, episode: int, value: float, series_id: str) -> None:
        pass
