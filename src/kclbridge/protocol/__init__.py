from . import fields
from . import message
from . import wire
from . import factory

from .message import MalformedMessage, Message, Record


"""
kclbridge Protocol Layer
========================

This package defines the line-delimited JSON protocol spoken between the
multi-language coordinator and the bridge. It provides the message
structures, the wire codec, and construction utilities.

The protocol layer MUST NOT depend on any transport implementation.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Dispatcher (dispatcher.py)
    Reads one message, invokes the user callback, acknowledges it

    │
    ▼
Checkpoint Handshake (checkpoint.py)
    Nested write-then-read exchange inside a callback

    │
    ▼
Wire Codec (wire.py)
    Message <-> single line of JSON
    - Two-phase decode on the ``action`` discriminator
    - Malformed input raises MalformedMessage

    │
    ▼
Message Model (message.py)
    Immutable msgspec structures
    - Record
    - one Message subclass per action

    │
    ▼
Field Vocabulary (fields.py)
    Canonical names for actions and wire fields
    Prevents string drift across system

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer
    Moves lines
    - stdin/stdout, diagnostics on stderr

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
