from .error_display import (
    Series,
    SeriesRecorder,
    TerminalErrorDisplay,
    create_diagnostics_sink,
)

__all__ = ["Series", "SeriesRecorder", "TerminalErrorDisplay", "create_diagnostics_sink"]
