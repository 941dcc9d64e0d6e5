""" Line framing over binary streams. By default this is the standard
    input, output, and error streams of the process, which is how the
    coordinator talks to the bridge.
"""

from __future__ import annotations

import logging
import sys
import traceback
from typing import BinaryIO, Optional

from ..protocol.message import MalformedMessage
from .base import Transport, TransportError

logger = logging.getLogger(__name__)

_NEWLINE = b"\n"


class StdioTransport(Transport):
    """ Read protocol lines from *input*, write protocol lines to *output*,
        and write diagnostics to *error*. All three are binary streams; any
        that are not specified default to the corresponding standard stream
        of this process.

        Every line written to *output* is flushed immediately: the
        coordinator may be blocked waiting for it before it sends anything
        else.
    """

    encoding = "utf-8"

    def __init__(self, input: Optional[BinaryIO] = None, output: Optional[BinaryIO] = None, error: Optional[BinaryIO] = None):

        if input is None:
            input = sys.stdin.buffer
        if output is None:
            output = sys.stdout.buffer
        if error is None:
            error = sys.stderr.buffer

        self.input = input
        self.output = output
        self.error = error


    def read_line(self) -> Optional[str]:

        # Blank lines carry no message; skip them rather than hand an empty
        # string to the decoder.

        while True:
            try:
                raw = self.input.readline()
            except ValueError as e:
                # Reading from a closed file.
                raise TransportError(str(e)) from e

            if raw == b"":
                logger.debug("end of input stream")
                return None

            raw = raw.rstrip(b"\r\n")
            if raw.strip() == b"":
                continue

            try:
                return raw.decode(self.encoding)
            except UnicodeDecodeError as e:
                raise MalformedMessage(raw, e) from e


    def write_line(self, line: str) -> None:

        if "\n" in line:
            raise ValueError("protocol lines cannot contain a newline: " + repr(line))

        self.output.write(line.encode(self.encoding) + _NEWLINE)
        self.output.flush()


    def write_error(self, message: str, exception: Optional[BaseException] = None) -> None:

        lines = [message]

        if exception is not None:
            formatted = traceback.format_exception(type(exception), exception, exception.__traceback__)
            for chunk in formatted:
                lines.extend(chunk.rstrip("\n").split("\n"))

        for line in lines:
            self.error.write(line.encode(self.encoding, errors="replace") + _NEWLINE)

        self.error.flush()


    def close(self) -> None:
        for stream in (self.input, self.output, self.error):
            try:
                stream.close()
            except OSError:
                logger.debug("error closing %r", stream, exc_info=True)


# end of class StdioTransport


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
