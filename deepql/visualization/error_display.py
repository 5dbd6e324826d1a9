"""
Error diagnostics sinks.

SeriesRecorder keeps every recorded point in memory; TerminalErrorDisplay
shows the latest TD error values in an in-place Rich terminal panel.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from ..core.diagnostics_interface import DiagnosticsSink


@dataclass
class Series:
    """History of one diagnostic series."""
    episodes: List[int] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    def latest(self) -> Optional[float]:
        return self.values[-1] if self.values else None


class SeriesRecorder(DiagnosticsSink):
    """In-memory sink, one Series per series id."""

    def __init__(self):
        self.series: Dict[str, Series] = {}

    def record(self, episode: int, value: float, series_id: str) -> None:
        entry = self.series.setdefault(series_id, Series())
        entry.episodes.append(episode)
        entry.values.append(value)

    def get(self, series_id: str) -> Series:
        """Get a series, empty if nothing was recorded under that id."""
        return self.series.get(series_id, Series())


def create_diagnostics_sink(config) -> DiagnosticsSink:
    """
    Create the sink selected by a DiagnosticsConfig.

    Args:
        config: Diagnostics settings

    Returns:
        A started TerminalErrorDisplay if terminal output is enabled,
        otherwise a SeriesRecorder
    """
    if config.terminal:
        display = TerminalErrorDisplay()
        display.start()
        return display
    return SeriesRecorder()


class TerminalErrorDisplay(DiagnosticsSink):
    """
    Rich-based terminal display of per-episode error series.

    Updates in-place without scrolling, showing the latest value of every
    series and a short log of recent episodes.
    """

    def __init__(
        self,
        update_interval: float = 0.5,
        log_every: int = 5,
        console: Optional[Console] = None,
    ):
        """
        Initialize the terminal display.

        Args:
            update_interval: Minimum seconds between display refreshes
            log_every: Add a message line every N episodes
            console: Console to draw on (default: a new stdout console)
        """
        self.update_interval = update_interval
        self.log_every = log_every
        self.console = console or Console(legacy_windows=False, markup=True)
        self.live: Optional[Live] = None

        self.current_episode = 0
        self.latest: Dict[str, float] = {}
        self.start_time = time.time()
        self.last_update = 0.0

        self.messages: deque = deque(maxlen=20)

    def start(self):
        """Start the live display."""
        self.start_time = time.time()
        self.live = Live(
            self._build_display(),
            console=self.console,
            refresh_per_second=4,
            transient=False,
        )
        self.live.start()

    def stop(self):
        """Stop the live display."""
        if self.live:
            self.live.stop()
            self.live = None

    def close(self) -> None:
        self.stop()

    def record(self, episode: int, value: float, series_id: str) -> None:
        is_new_episode = episode != self.current_episode
        self.current_episode = episode
        self.latest[series_id] = value

        if is_new_episode and self.log_every > 0 and episode % self.log_every == 0:
            self.add_message(f"[dim]Ep {episode}:[/] {series_id}={value:.6f}")

        now = time.time()
        if self.live and (now - self.last_update) >= self.update_interval:
            self.live.update(self._build_display())
            self.last_update = now

    def add_message(self, message: str):
        """Add a message to the display."""
        self.messages.append(message)

    def _build_display(self) -> Panel:
        """Build the complete display panel."""
        return Panel(
            Group(self._build_metrics_table(), self._build_messages_panel()),
            title="DQN Training Error",
            border_style="blue",
        )

    def _build_metrics_table(self) -> Panel:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Metric", style="cyan", width=18)
        table.add_column("Value", style="white")

        table.add_row("Episode", f"{self.current_episode}")
        for series_id, value in sorted(self.latest.items()):
            table.add_row(series_id, f"{value:.6f}")
        table.add_row("Elapsed", self._format_time(time.time() - self.start_time))

        return Panel(table, title="Metrics", border_style="yellow")

    def _build_messages_panel(self) -> Panel:
        if not self.messages:
            content = "[dim]No messages yet...[/]"
        else:
            content = "\n".join(self.messages)

        return Panel(content, title="Messages", border_style="blue")

    def _format_time(self, seconds: float) -> str:
        """Format seconds into HH:MM:SS."""
        if seconds < 0:
            return "--:--:--"
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = int(seconds % 60)
        if hours > 0:
            return f"{hours}:{minutes:02d}:{secs:02d}"
        return f"{minutes:02d}:{secs:02d}"
