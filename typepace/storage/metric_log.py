"""Append-only CSV log of completed typing sessions."""

import os
import logging
from pathlib import Path
from typing import List, Optional

from ..models.metrics import MetricRecord

logger = logging.getLogger(__name__)

HEADER = "timestamp,manual_wpm,assisted_wpm,duration,manual_chars,total_chars"
FIELD_COUNT = 6


def format_record(record: MetricRecord) -> str:
    """Format a record as one CSV line (without newline)."""
    return (f"{record.timestamp},{int(record.manual_wpm)},{int(record.assisted_wpm)},"
            f"{record.duration:.1f},{int(record.manual_chars)},{int(record.total_chars)}")


def _to_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def parse_record(line: str, require_wpm: bool = False) -> Optional[MetricRecord]:
    """Parse one CSV line into a record.

    Args:
        line: Raw line from the log
        require_wpm: Reject the line when either WPM field is not numeric,
                     instead of defaulting it to zero

    Returns:
        MetricRecord, or None for the header and malformed lines
    """
    line = line.strip()
    if not line or line.startswith("timestamp,"):
        return None

    parts = [part.strip() for part in line.split(",")]
    if len(parts) < FIELD_COUNT:
        return None

    numbers = [_to_number(part) for part in parts[1:FIELD_COUNT]]
    if require_wpm and (numbers[0] is None or numbers[1] is None):
        return None
    manual_wpm, assisted_wpm, duration, manual_chars, total_chars = [n if n is not None else 0 for n in numbers]

    return MetricRecord(
        timestamp=parts[0],
        manual_wpm=int(manual_wpm),
        assisted_wpm=int(assisted_wpm),
        duration=float(duration),
        manual_chars=int(manual_chars),
        total_chars=int(total_chars),
    )


class MetricLogStore:
    """Persists completed sessions as CSV lines and reads them back.

    Every operation degrades to a no-op when the file cannot be opened:
    reads return nothing, appends are dropped. Tracking must never fail
    because of the log.
    """

    SMALL_FILE_BYTES = 1024
    CHUNK_SIZE = 1024
    TAIL_MARGIN = 10

    def __init__(self, log_file: str):
        """Initialize metric log store.

        Args:
            log_file: Path of the CSV file
        """
        self.path = Path(log_file)
        logger.info(f"MetricLogStore initialized with log file: {self.path}")

    def _ensure_directory(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create log directory {self.path.parent}: {e}")

    def append(self, record: MetricRecord) -> bool:
        """Append one record, writing the header first if the file is empty.

        Returns:
            True if the line was written, False if it was dropped
        """
        self._ensure_directory()
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.seek(0, os.SEEK_END)
                if f.tell() == 0:
                    f.write(HEADER + "\n")
                f.write(format_record(record) + "\n")
            logger.debug(f"Appended session record: {format_record(record)}")
            return True
        except OSError as e:
            logger.warning(f"Dropping session record, log not writable: {e}")
            return False

    def read_all(self) -> List[MetricRecord]:
        """Read every valid record in file order."""
        try:
            with open(self.path, "r", encoding="utf-8", errors="replace") as f:
                records = [parse_record(line) for line in f]
        except OSError as e:
            logger.debug(f"Metric log not readable: {e}")
            return []

        return [r for r in records if r is not None]

    def read_tail(self, n: int) -> List[MetricRecord]:
        """Read up to the last n valid records without scanning the whole file."""
        if n <= 0:
            return []

        lines = self._read_last_lines(n + self.TAIL_MARGIN)
        records = [parse_record(line, require_wpm=True) for line in lines]
        records = [r for r in records if r is not None]
        return records[-n:]

    def _read_last_lines(self, n: int) -> List[str]:
        """Read the last n non-empty lines, walking backwards in chunks for large files."""
        try:
            with open(self.path, "rb") as f:
                f.seek(0, os.SEEK_END)
                file_size = f.tell()

                if file_size < self.SMALL_FILE_BYTES:
                    f.seek(0)
                    raw_lines = f.read().split(b"\n")
                else:
                    raw_lines = []
                    fragment = b""
                    pos = file_size
                    while pos > 0 and len(raw_lines) < n:
                        read_size = min(self.CHUNK_SIZE, pos)
                        pos -= read_size
                        f.seek(pos)
                        parts = (f.read(read_size) + fragment).split(b"\n")
                        # First part may be the tail of a line that starts in an earlier chunk
                        fragment = parts[0]
                        raw_lines = [p for p in parts[1:] if p.strip()] + raw_lines
                    if pos == 0 and fragment.strip():
                        raw_lines.insert(0, fragment)
        except OSError as e:
            logger.debug(f"Metric log not readable: {e}")
            return []

        lines = [line.decode("utf-8", errors="replace") for line in raw_lines if line.strip()]
        return lines[-n:]

    def size(self) -> Optional[int]:
        """Current size of the log in bytes, None when the file is missing."""
        try:
            return self.path.stat().st_size
        except OSError:
            return None

    def clear(self) -> bool:
        """Truncate the log to zero bytes.

        Returns:
            True if the file was truncated
        """
        self._ensure_directory()
        try:
            with open(self.path, "w", encoding="utf-8"):
                pass
            logger.info(f"Cleared metric log: {self.path}")
            return True
        except OSError as e:
            logger.error(f"Could not clear metric log {self.path}: {e}")
            return False
