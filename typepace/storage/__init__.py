"""Persistent storage for completed typing sessions."""

from .metric_log import MetricLogStore, format_record, parse_record, HEADER

__all__ = [
    "MetricLogStore",
    "format_record",
    "parse_record",
    "HEADER",
]
