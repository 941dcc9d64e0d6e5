from __future__ import annotations

from typing import Union

import msgspec

from . import fields
from .message import MalformedMessage, Message, variants


class _Header(msgspec.Struct):
    """ Just enough of a message to identify which variant it is; every
        other field is ignored on the first decoding pass.
    """

    action: str = msgspec.field(name=fields.ACTION)


_header_decoder = msgspec.json.Decoder(_Header)
_encoder = msgspec.json.Encoder()

_decoders = dict()
for _action, _variant in variants.items():
    _decoders[_action] = msgspec.json.Decoder(_variant)

del _action, _variant


def decode(line: Union[str, bytes]) -> Message:
    """
    Deserialize one line -> Message

    The line is decoded twice: once to read the ``action`` discriminator,
    and again against the schema of the variant it selects.
    """

    if isinstance(line, str):
        raw = line.encode("utf-8")
    else:
        raw = line

    raw = raw.rstrip(b"\r\n")

    try:
        header = _header_decoder.decode(raw)
    except msgspec.DecodeError as e:
        raise MalformedMessage(line, e) from e

    try:
        decoder = _decoders[header.action]
    except KeyError:
        raise MalformedMessage(line, reason="unknown action " + repr(header.action))

    try:
        return decoder.decode(raw)
    except msgspec.DecodeError as e:
        raise MalformedMessage(line, e) from e


def encode(msg: Message) -> str:
    """
    Serialize Message -> str

    The result is a single line of compact JSON with no trailing newline;
    strings are escaped by the encoder, so no newline can be embedded.
    """

    return _encoder.encode(msg).decode("utf-8")
