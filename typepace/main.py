"""Main application entry point for TypePace."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .config import TypePaceConfig
from .services.tracker_service import TrackerService
from .tracking.scheduler import ManualScheduler
from .ui.chart_view import ChartView

logger = logging.getLogger(__name__)

INVALID_POINTS = "Invalid number of points. Please provide a positive integer."


def setup_logging(config: TypePaceConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.debug(f"Log file: {log_file_path}, level: {level}")


def positive_int(value: str) -> int:
    """argparse type for the optional point count."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(INVALID_POINTS)
    if number <= 0:
        raise argparse.ArgumentTypeError(INVALID_POINTS)
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typepace",
        description="TypePace - typing speed statistics and charts",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="TypePace v0.1.0"
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("stats", help="Show WPM tracker statistics")
    commands.add_parser("log", help="Open the WPM log file")

    clear = commands.add_parser("clear", help="Clear WPM history and log file")
    clear.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    for name, help_text in (("plot", "Print WPM charts with moving average smoothing"),
                            ("view", "Open WPM charts in a scrollable pager")):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("points", nargs="?", type=positive_int,
                             help="Number of most recent sessions to plot")

    return parser


def run_command(args: argparse.Namespace, service: TrackerService, view: ChartView) -> bool:
    """Execute one CLI command.

    Returns:
        True on success
    """
    if args.command == "stats":
        view.show_stats(service.get_stats())
        return True

    if args.command == "log":
        return view.page_log(str(service.store.path))

    if args.command == "clear":
        if not args.yes and not view.confirm_clear():
            view.message("WPM history clear cancelled")
            return True
        if service.clear_history():
            view.message("WPM history cleared successfully")
            return True
        view.error(f"Could not clear WPM log file at {service.store.path}")
        return False

    if args.command in ("plot", "view"):
        if not service.read_history():
            view.message("No WPM data available for plotting")
            return True
        report = service.render_charts(args.points, columns=view.width)
        if args.command == "plot":
            view.show_charts(report)
        else:
            view.page_charts(report)
        return True

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for TypePace."""
    args = build_parser().parse_args(argv)

    try:
        config = TypePaceConfig(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    setup_logging(config, args.log_level or config.get('logging.level', 'INFO'))

    # Commands run once and never arm timers; a virtual clock is enough
    service = TrackerService(config, scheduler=ManualScheduler(start=time.monotonic()))
    service.load_history()
    view = ChartView()

    try:
        ok = run_command(args, service, view)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
        return
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        service.close()

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
