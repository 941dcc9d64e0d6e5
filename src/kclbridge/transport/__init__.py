"""Transport layer implementations."""

from .base import (
    Transport,
    TransportError,
    TransportClosed,
)

from .stdio import StdioTransport
