""" The callback surfaces a user implements to process records, the input
    objects handed to each callback, and the adapter that lets a processor
    written against the original three-method surface be driven by the
    same :class:`kclbridge.dispatcher.Dispatcher`.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .checkpoint import Checkpointer
    from .protocol.message import Record


class ShutdownReason(enum.Enum):
    """ Why a legacy :class:`RecordProcessor` is being shut down. A ZOMBIE
        processor lost its lease and can no longer checkpoint; a TERMINATE
        processor reached the end of its shard and should checkpoint.
    """

    ZOMBIE = 'ZOMBIE'
    TERMINATE = 'TERMINATE'


class InitializationInput:

    def __init__(self, shard_id: str, sequence_number: Optional[str] = None, sub_sequence_number: Optional[int] = None):
        self.shard_id = shard_id
        self.sequence_number = sequence_number
        self.sub_sequence_number = sub_sequence_number


class ProcessRecordsInput:
    """ A batch of records, the :class:`Checkpointer` to record progress
        with, and how far behind the tip of the stream this batch is, in
        milliseconds, if the coordinator reported it.
    """

    def __init__(self, records: List[Record], checkpointer: Checkpointer, millis_behind_latest: Optional[int] = None):
        self.records = records
        self.checkpointer = checkpointer
        self.millis_behind_latest = millis_behind_latest


class LeaseLostInput:
    """ Deliberately empty: there is no checkpointer once the lease is gone.
    """


class ShardEndedInput:

    def __init__(self, checkpointer: Checkpointer):
        self.checkpointer = checkpointer


class ShutdownRequestedInput:

    def __init__(self, checkpointer: Checkpointer):
        self.checkpointer = checkpointer


class ShutdownInput:

    def __init__(self, reason: ShutdownReason, checkpointer: Optional[Checkpointer] = None):
        self.reason = reason
        self.checkpointer = checkpointer



class ShardRecordProcessor(ABC):
    """ The callback surface driven by the dispatcher. Each method is invoked
        once per corresponding message from the coordinator; any exception
        raised is fatal to the bridge.
    """

    @abstractmethod
    def initialize(self, input: InitializationInput) -> None:
        """Called once, before any records are delivered for the shard."""

    @abstractmethod
    def process_records(self, input: ProcessRecordsInput) -> None:
        """Process a batch of records, checkpointing as appropriate."""

    @abstractmethod
    def lease_lost(self, input: LeaseLostInput) -> None:
        """Another worker owns the shard now; checkpointing is not possible."""

    @abstractmethod
    def shard_ended(self, input: ShardEndedInput) -> None:
        """The shard has been fully read; checkpoint to record completion."""

    @abstractmethod
    def shutdown_requested(self, input: ShutdownRequestedInput) -> None:
        """The coordinator is shutting down; optionally checkpoint."""


# end of class ShardRecordProcessor



class RecordProcessor(ABC):
    """ The original, three-method callback surface. Lease loss and shard
        end are both delivered through :func:`shutdown`, distinguished by
        the :class:`ShutdownReason`.
    """

    @abstractmethod
    def initialize(self, input: InitializationInput) -> None:
        pass

    @abstractmethod
    def process_records(self, input: ProcessRecordsInput) -> None:
        pass

    @abstractmethod
    def shutdown(self, input: ShutdownInput) -> None:
        pass


# end of class RecordProcessor



class RecordProcessorAdapter(ShardRecordProcessor):
    """ Present a legacy :class:`RecordProcessor` as a
        :class:`ShardRecordProcessor`. No I/O happens here.
    """

    def __init__(self, processor: RecordProcessor):
        self.processor = processor


    def initialize(self, input):
        self.processor.initialize(input)


    def process_records(self, input):
        self.processor.process_records(input)


    def lease_lost(self, input):
        self.processor.shutdown(ShutdownInput(ShutdownReason.ZOMBIE, None))


    def shard_ended(self, input):
        self.processor.shutdown(ShutdownInput(ShutdownReason.TERMINATE, input.checkpointer))


    def shutdown_requested(self, input):
        # The legacy surface has no counterpart.
        pass


# end of class RecordProcessorAdapter


def adapt(processor):
    """ Return a :class:`ShardRecordProcessor` for *processor*, wrapping it
        in a :class:`RecordProcessorAdapter` if it only implements the
        legacy surface.
    """

    if isinstance(processor, ShardRecordProcessor):
        return processor

    if isinstance(processor, RecordProcessor):
        return RecordProcessorAdapter(processor)

    # Duck typing for processors that don't subclass either ABC.

    names = ('initialize', 'process_records', 'lease_lost', 'shard_ended', 'shutdown_requested')
    if all(callable(getattr(processor, name, None)) for name in names):
        return processor

    names = ('initialize', 'process_records', 'shutdown')
    if all(callable(getattr(processor, name, None)) for name in names):
        return RecordProcessorAdapter(processor)

    raise TypeError('not a record processor: ' + repr(processor))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
