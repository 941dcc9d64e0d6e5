"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`kclbridge.protocol` so the protocol remains
transport-agnostic: a transport moves lines of text, nothing more.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportClosed(TransportError):
    """The input stream ended where another line was required."""


class Transport(ABC):
    """Minimal contract for a line-oriented transport."""

    @abstractmethod
    def read_line(self) -> Optional[str]:
        """Block for the next line; return None at end-of-stream."""

    @abstractmethod
    def write_line(self, line: str) -> None:
        """Write one protocol line and flush it immediately."""

    @abstractmethod
    def write_error(self, message: str, exception: Optional[BaseException] = None) -> None:
        """Write a diagnostic to the error channel, never the protocol channel."""

    def close(self) -> None:
        """Release the underlying streams."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
