"""
Tests for infrastructure components (config loading, logging, device selection,
diagnostics sinks).
"""

import io
import logging

import pytest
import yaml


class TestConfigLoading:
    """Tests for configuration loading."""

    def test_load_config(self, tmp_path, sample_config):
        """Test loading a YAML config file."""
        from deepql.utils.config_loader import load_config

        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump(sample_config))

        config = load_config(str(path))

        assert config.agent.batch_size == 16
        assert config.agent.hidden_layers == [32, 16]
        assert config.device.force_cpu is True
        assert config.logging.level == "DEBUG"
        # Missing section falls back to defaults
        assert config.diagnostics.window == 100

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing config file yields default settings."""
        from deepql.utils.config_loader import load_config

        config = load_config(str(tmp_path / "nope.yaml"))

        assert config.agent.replay_size == 2000
        assert config.agent.batch_size == 32

    def test_unknown_keys_ignored(self):
        """Test unknown keys in a section are dropped."""
        from deepql.utils.config_loader import config_from_dict

        config = config_from_dict({'agent': {'batch_size': 8, 'epsilon_decay': 0.99}})

        assert config.agent.batch_size == 8
        assert not hasattr(config.agent, 'epsilon_decay')

    @pytest.mark.parametrize("agent", [
        {'batch_size': 0},
        {'replay_size': -1},
        {'target_update_interval': -2},
        {'hidden_layers': [24, 0]},
    ])
    def test_invalid_values_rejected(self, agent):
        """Test invalid agent settings raise ConfigurationError."""
        from deepql.utils.config_loader import ConfigurationError, config_from_dict

        with pytest.raises(ConfigurationError):
            config_from_dict({'agent': agent})

    def test_configuration_error_is_value_error(self):
        """Test callers catching ValueError also catch config errors."""
        from deepql.utils.config_loader import ConfigurationError

        assert issubclass(ConfigurationError, ValueError)

    def test_save_and_reload(self, tmp_path, sample_config):
        """Test a saved config loads back the same."""
        from deepql.utils.config_loader import config_from_dict, load_config, save_config

        config = config_from_dict(sample_config)
        path = tmp_path / "out" / "config.yaml"
        save_config(config, str(path))

        assert load_config(str(path)) == config

    def test_sync_policy_from_config(self, sample_config):
        """Test the agent section resolves a sync policy."""
        from deepql.ai.target_sync import EpisodeEnd, HardPeriodic
        from deepql.utils.config_loader import config_from_dict

        config = config_from_dict(sample_config)
        assert config.agent.sync_policy() == HardPeriodic(100)

        config.agent.target_update_on_episode_end = True
        assert config.agent.sync_policy() == EpisodeEnd()


@pytest.fixture
def restore_package_logger():
    """Undo setup_logging changes so other tests' log capture keeps working."""
    log = logging.getLogger("deepql")
    handlers, level, propagate = list(log.handlers), log.level, log.propagate
    yield log
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    for handler in handlers:
        log.addHandler(handler)
    log.setLevel(level)
    log.propagate = propagate


class TestLoggingSetup:
    """Tests for logging configuration."""

    def test_rich_handler_installed(self, restore_package_logger):
        """Test setup_logging attaches a Rich handler at the configured level."""
        from rich.logging import RichHandler
        from deepql.utils.config_loader import LoggingConfig
        from deepql.utils.logging_setup import setup_logging

        log = setup_logging(LoggingConfig(level="debug"))

        assert log.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in log.handlers)

    def test_default_config_when_omitted(self, restore_package_logger):
        """Test setup_logging without a config falls back to LoggingConfig defaults."""
        import typing
        from deepql.utils.config_loader import LoggingConfig
        from deepql.utils.logging_setup import setup_logging

        log = setup_logging()

        assert log.level == logging.INFO
        hints = typing.get_type_hints(setup_logging)
        assert hints["config"] == typing.Optional[LoggingConfig]

    def test_repeated_setup_does_not_duplicate(self, restore_package_logger):
        """Test calling setup twice keeps a single handler."""
        from deepql.utils.logging_setup import setup_logging

        setup_logging()
        log = setup_logging()

        assert len(log.handlers) == 1

    def test_log_file(self, tmp_path, restore_package_logger):
        """Test records are written to the configured log file."""
        from deepql.utils.config_loader import LoggingConfig
        from deepql.utils.logging_setup import setup_logging

        log_file = tmp_path / "logs" / "training.log"
        setup_logging(LoggingConfig(level="INFO", log_file=str(log_file)))

        logging.getLogger("deepql.ai.dqn_agent").info("episode done")
        for handler in logging.getLogger("deepql").handlers:
            handler.flush()

        assert "episode done" in log_file.read_text()


class TestDeviceManager:
    """Tests for device selection."""

    def test_force_cpu(self):
        """Test force_cpu always selects the CPU."""
        from deepql.device.device_manager import DeviceManager

        manager = DeviceManager(preferred="cuda", force_cpu=True)

        assert manager.get_device_type() == "cpu"
        assert manager.get_device().type == "cpu"
        assert manager.get_summary() == "CPU"

    def test_from_config(self):
        """Test building from a DeviceConfig."""
        from deepql.device.device_manager import DeviceManager
        from deepql.utils.config_loader import DeviceConfig

        manager = DeviceManager.from_config(DeviceConfig(preferred="cpu"))

        assert manager.get_device_type() == "cpu"

    def test_auto_detection_returns_a_device(self):
        """Test auto detection always succeeds."""
        from deepql.device.device_manager import DeviceManager

        info = DeviceManager(preferred="auto").detect_device()

        assert info.device_type in ("cuda", "mps", "cpu")


class TestDiagnosticsSinks:
    """Tests for the shipped diagnostics sinks."""

    def test_series_recorder(self):
        """Test points are grouped by series id in order."""
        from deepql.visualization.error_display import SeriesRecorder

        recorder = SeriesRecorder()
        recorder.record(1, 0.5, "error")
        recorder.record(1, 0.5, "error_moving_avg")
        recorder.record(2, 0.25, "error")

        assert recorder.get("error").episodes == [1, 2]
        assert recorder.get("error").values == [0.5, 0.25]
        assert recorder.get("error").latest() == 0.25
        assert recorder.get("missing").latest() is None

    def test_null_sink_accepts_anything(self):
        """Test the default sink discards points."""
        from deepql.core.diagnostics_interface import NullDiagnosticsSink

        sink = NullDiagnosticsSink()
        sink.record(1, float("nan"), "error")
        sink.close()

    def test_terminal_display_tracks_latest_values(self):
        """Test the terminal display keeps the latest value per series."""
        from rich.console import Console
        from deepql.visualization.error_display import TerminalErrorDisplay

        display = TerminalErrorDisplay(log_every=5, console=Console(file=io.StringIO()))
        for episode in range(1, 11):
            display.record(episode, episode / 10, "error")
            display.record(episode, 0.5, "error_moving_avg")

        assert display.current_episode == 10
        assert display.latest == {"error": 1.0, "error_moving_avg": 0.5}
        assert len(display.messages) == 2

    def test_terminal_display_renders(self):
        """Test start/record/stop draws the panel to the console."""
        from rich.console import Console
        from deepql.visualization.error_display import TerminalErrorDisplay

        output = io.StringIO()
        display = TerminalErrorDisplay(update_interval=0.0, console=Console(file=output, width=80))
        display.start()
        display.record(5, 0.125, "error")
        display.close()

        assert display.live is None
        assert "DQN Training Error" in output.getvalue()
