"""Serialized protocol output.

The command loop and the search thread both write to stdout. Every reply
goes through one lock so that two logical replies never interleave.
"""

import sys
import threading
from typing import TextIO

from loguru import logger


class SyncOutput:
    """Line-oriented, thread-safe writer for UCI replies."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.RLock()

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so that a replaced sys.stdout is honored.
        return self._stream if self._stream is not None else sys.stdout

    def send(self, *lines: str) -> None:
        """Write one reply made of one or more lines and flush."""
        text = "\n".join(lines)
        with self._lock:
            logger.trace(f">> {text}")
            self.stream.write(text + "\n")
            self.stream.flush()
