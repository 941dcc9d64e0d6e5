""" The message model for the multi-language protocol. Every message is an
    immutable :class:`msgspec.Struct`, tagged on the ``action`` field, so
    that the Python representation and the on-the-wire representation can
    never drift apart.
"""

from typing import ClassVar, List, Optional

import msgspec

from . import fields


class MalformedMessage(ValueError):
    """ Raised when a line received from the coordinator cannot be understood.
        The offending *line* is retained; the underlying decoding error, if
        any, is available as the ``__cause__`` of the exception.

        Receiving a malformed message is always fatal: the coordinator and
        the bridge can no longer be assumed to agree on the protocol state.
    """

    def __init__(self, line, cause=None, reason=None):

        if isinstance(line, bytes):
            line = line.decode('utf-8', errors='replace')

        if reason is None:
            text = "received a message which couldn't be understood: " + line
        else:
            text = reason + ': ' + line

        ValueError.__init__(self, text)

        self.line = line
        self.__cause__ = cause


# end of class MalformedMessage



class Record(msgspec.Struct, frozen=True, kw_only=True):
    """ A single data record delivered in a :class:`ProcessRecords` message.
        The payload arrives base64-encoded; it is decoded once, when the
        enclosing message is decoded, and the raw bytes are kept as *data*.

        :ivar data: The record payload, as bytes.
        :ivar sequence_number: Opaque, ordered sequence number for the record.
        :ivar sub_sequence_number: Set only for de-aggregated records.
        :ivar partition_key: The partition key the producer supplied.
        :ivar approximate_arrival_timestamp: Arrival time reported by the stream.
    """

    sequence_number: str = msgspec.field(name=fields.SEQUENCE_NUMBER)
    data: bytes = msgspec.field(name=fields.DATA)
    partition_key: str = msgspec.field(name=fields.PARTITION_KEY)
    sub_sequence_number: Optional[int] = msgspec.field(default=None, name=fields.SUB_SEQUENCE_NUMBER)
    approximate_arrival_timestamp: float = msgspec.field(default=0.0, name=fields.APPROXIMATE_ARRIVAL_TIMESTAMP)


# end of class Record



class Message(msgspec.Struct, frozen=True, tag_field=fields.ACTION):
    """ Base class for every protocol message. Subclasses declare their
        wire discriminator both as the msgspec tag and as :attr:`kind`.
    """

    kind: ClassVar[str] = ''


class Initialize(Message, tag=fields.INITIALIZE, kw_only=True):
    kind: ClassVar[str] = fields.INITIALIZE

    shard_id: str = msgspec.field(name=fields.SHARD_ID)
    sequence_number: Optional[str] = msgspec.field(default=None, name=fields.SEQUENCE_NUMBER)
    sub_sequence_number: Optional[int] = msgspec.field(default=None, name=fields.SUB_SEQUENCE_NUMBER)


class ProcessRecords(Message, tag=fields.PROCESS_RECORDS, kw_only=True):
    kind: ClassVar[str] = fields.PROCESS_RECORDS

    records: List[Record] = msgspec.field(name=fields.RECORDS)
    millis_behind_latest: Optional[int] = msgspec.field(default=None, name=fields.MILLIS_BEHIND_LATEST)


class LeaseLost(Message, tag=fields.LEASE_LOST):
    kind: ClassVar[str] = fields.LEASE_LOST


class ShardEnded(Message, tag=fields.SHARD_ENDED):
    kind: ClassVar[str] = fields.SHARD_ENDED


class ShutdownRequested(Message, tag=fields.SHUTDOWN_REQUESTED):
    kind: ClassVar[str] = fields.SHUTDOWN_REQUESTED


class Checkpoint(Message, tag=fields.CHECKPOINT, kw_only=True):
    """ Sent by the bridge as a checkpoint request, with *error* unset, and
        received back from the coordinator as the response; the response
        carries an *error* only if the checkpoint failed.
    """

    kind: ClassVar[str] = fields.CHECKPOINT

    sequence_number: Optional[str] = msgspec.field(default=None, name=fields.SEQUENCE_NUMBER)
    error: Optional[str] = msgspec.field(default=None, name=fields.ERROR)


class Status(Message, tag=fields.STATUS, kw_only=True):
    """ Acknowledges that the callback for *response_for* has completed.
    """

    kind: ClassVar[str] = fields.STATUS

    response_for: str = msgspec.field(name=fields.RESPONSE_FOR)


# The closed set of message variants, keyed by their wire discriminator.

variants = dict()
for _variant in (Initialize, ProcessRecords, LeaseLost, ShardEnded,
                 ShutdownRequested, Checkpoint, Status):
    variants[_variant.kind] = _variant

del _variant


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
