"""Logging and timing helpers."""

from .logging_utils import setup_logging, Timer, TimingStats, LOGGER_NAME

__all__ = ['setup_logging', 'Timer', 'TimingStats', 'LOGGER_NAME']
