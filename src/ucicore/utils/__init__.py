"""Shared utilities for ucicore."""

from ucicore.utils.logging import set_debug_log_file, setup_logging
from ucicore.utils.output import SyncOutput

__all__ = ["SyncOutput", "set_debug_log_file", "setup_logging"]
