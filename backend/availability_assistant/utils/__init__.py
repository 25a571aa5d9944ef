"""Utility modules for the Availability Assistant."""

from .config import settings
from .logger import logger, setup_logger
from .time_utils import TimeFormat, format_date_time, format_time

__all__ = ["settings", "logger", "setup_logger", "TimeFormat", "format_date_time", "format_time"]
