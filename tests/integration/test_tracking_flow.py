"""Integration tests for the editor signal to metric log workflow."""

import asyncio
import logging
import uuid
import pytest
from pathlib import Path
from unittest.mock import patch

from typepace.config import TypePaceConfig
from typepace.main import INVALID_POINTS, main, setup_logging
from typepace.models.metrics import Metric
from typepace.services.tracker_service import TrackerService
from typepace.storage.metric_log import HEADER, MetricLogStore
from typepace.tracking.signals import EditorSignalPublisher


@pytest.mark.integration
class TestTrackingFlowIntegration:
    """Signals published over pub/sub end up as logged sessions."""

    def test_published_session_is_recorded(self, service, scheduler, log_file):
        """Test complete workflow from published signals to the metric log."""
        publisher = EditorSignalPublisher(topic_prefix=service.topic_prefix)

        # Hand typing followed by a completion
        publisher.typing_started(buffer_size=0)
        for _ in range(95):
            scheduler.advance(0.1)
            publisher.char_typed()
        publisher.content_changed(185)
        scheduler.advance(2.8)

        assert service.is_tracking() is True
        assert service.get_current_assisted_wpm() > 0

        publisher.typing_ended()

        # Verify the session line and the averages
        lines = Path(log_file).read_text().splitlines()
        assert lines == [HEADER, "2025-03-14 09:30:12,93,180,12.3,95,185"]
        assert service.get_wpm_display() == "⚡180 wpm"

    def test_two_instances_share_log(self, test_config, scheduler, wall_clock):
        """Test that a second instance picks up sessions on focus."""
        writer = TrackerService(test_config, scheduler=scheduler, topic_prefix=f"test_{uuid.uuid4().hex}",
                                wall_clock=wall_clock)
        reader = TrackerService(test_config, scheduler=scheduler, topic_prefix=f"test_{uuid.uuid4().hex}",
                                wall_clock=wall_clock)
        writer.start()
        reader.start()
        try:
            typing = EditorSignalPublisher(writer.topic_prefix)
            typing.typing_started()
            for _ in range(2):
                for _ in range(30):
                    typing.char_typed()
                scheduler.advance(3.0)
            typing.shutdown()

            assert writer.get_current_manual_wpm() == 120
            assert reader.get_current_manual_wpm() == 0

            EditorSignalPublisher(reader.topic_prefix).focus_gained()

            assert reader.get_current_manual_wpm() == 120
        finally:
            writer.close()
            reader.close()

    def test_asyncio_timers(self, config_file):
        """Test idle expiry and live refresh on a real event loop."""
        config = TypePaceConfig(config_file, overrides={
            "tracking": {"min_session_length": 50, "update_interval": 20, "idle_timeout": 100},
        })

        async def scenario():
            service = TrackerService(config, topic_prefix=f"test_{uuid.uuid4().hex}")
            service.start()
            publisher = EditorSignalPublisher(service.topic_prefix)
            try:
                # A paused session with input stays open until typing ends
                publisher.typing_started(buffer_size=0)
                for _ in range(10):
                    publisher.char_typed()
                await asyncio.sleep(0.06)
                live = service.machine.session_wpm[Metric.MANUAL]
                await asyncio.sleep(0.2)
                tracking_after_pause = service.is_tracking()
                publisher.typing_ended()

                # An empty session ends on its own
                publisher.typing_started(buffer_size=0)
                await asyncio.sleep(0.2)
                tracking_when_empty = service.is_tracking()
                return live, tracking_after_pause, tracking_when_empty
            finally:
                service.close()

        live, tracking_after_pause, tracking_when_empty = asyncio.run(scenario())

        assert live > 0
        assert tracking_after_pause is True
        assert tracking_when_empty is False
        records = MetricLogStore(config.get_log_file()).read_all()
        assert len(records) == 1
        assert records[0].manual_chars == 10


@pytest.mark.integration
class TestCommandLine:
    """Command line entry point against a temporary log."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self):
        with patch("typepace.main.setup_logging"):
            yield

    @pytest.fixture
    def filled_log(self, test_config, history):
        store = MetricLogStore(test_config.get_log_file())
        for record in history([50, 60, 70, 80]):
            store.append(record)
        return store

    def test_stats(self, config_file, filled_log, capsys):
        main(["--config", config_file, "stats"])

        out = capsys.readouterr().out
        assert "WPM Stats" in out
        assert "65" in out  # manual average of 50..80
        assert "Last session: 2025-03-14 09:15:00" in out

    def test_plot(self, config_file, filled_log, capsys):
        main(["--config", config_file, "plot", "3"])

        out = capsys.readouterr().out
        assert "WPM Charts (raw + smoothed):" in out
        assert "Manual WPM (n=3" in out
        assert "Total sessions: 4" in out

    def test_plot_without_data(self, config_file, capsys):
        main(["--config", config_file, "plot"])

        assert "No WPM data available for plotting" in capsys.readouterr().out

    def test_invalid_points(self, config_file, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", config_file, "plot", "-3"])

        assert exc_info.value.code == 2
        assert INVALID_POINTS in capsys.readouterr().err

    def test_clear(self, config_file, filled_log, capsys):
        main(["--config", config_file, "clear", "--yes"])

        assert "WPM history cleared successfully" in capsys.readouterr().out
        assert filled_log.size() == 0

    def test_clear_cancelled(self, config_file, filled_log, capsys):
        with patch("typepace.ui.chart_view.Confirm.ask", return_value=False):
            main(["--config", config_file, "clear"])

        assert "cancelled" in capsys.readouterr().out
        assert len(filled_log.read_all()) == 4

    def test_missing_config(self, temp_data_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", f"{temp_data_dir}/absent.yaml", "stats"])

        assert exc_info.value.code == 1
        assert "Configuration file not found" in capsys.readouterr().out


@pytest.mark.integration
def test_setup_logging_writes_file(test_config):
    """Test that logging goes to the configured file."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(test_config, "DEBUG")
        logging.getLogger("typepace.test").info("hello from test")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert "hello from test" in Path(test_config.get("logging.file_path")).read_text()
