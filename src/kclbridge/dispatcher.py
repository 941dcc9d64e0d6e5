""" The main loop of the bridge. A :class:`Dispatcher` reads one message at
    a time from the coordinator, invokes the matching callback on the
    record processor, and acknowledges completion with a status message.
"""

from __future__ import annotations

import logging
import threading

from . import processor as processors
from .checkpoint import Checkpointer
from .protocol import factory, fields, wire
from .protocol.message import (
    Initialize,
    LeaseLost,
    MalformedMessage,
    ProcessRecords,
    ShardEnded,
    ShutdownRequested,
)
from .transport.base import TransportError
from .transport.stdio import StdioTransport

logger = logging.getLogger(__name__)


class Dispatcher:
    """ Drive a record *processor* from the messages arriving on *transport*,
        which defaults to the standard streams of this process. The
        *processor* may implement either
        :class:`kclbridge.processor.ShardRecordProcessor` or the legacy
        :class:`kclbridge.processor.RecordProcessor`.

        There is exactly one thread of control: a message is read, its
        callback runs to completion, including any nested checkpoint
        exchanges, and only then is its status written and the next message
        read.

        :ivar checkpointer: The :class:`Checkpointer` handed to callbacks.
        :ivar state: One of IDLE, DISPATCHING, or AWAITING_CHECKPOINT.
        :ivar thread: Identifier of the thread running the current callback.
    """

    def __init__(self, processor, transport=None):

        processor = processors.adapt(processor)

        if transport is None:
            transport = StdioTransport()

        self.processor = processor
        self.transport = transport
        self.state = fields.IDLE
        self.thread = None
        self.checkpointer = Checkpointer(self)


    def run(self):
        """ Process messages until the coordinator closes the input stream.
            Malformed messages and any exception raised by the processor
            are reported on the diagnostic channel and then re-raised;
            neither is recoverable.
        """

        while self.process_next_line():
            pass

        logger.debug("input closed, dispatcher exiting")


    def process_next_line(self):
        """ Read and dispatch a single message. Returns False at end of
            input, True otherwise. A transport failure while waiting for
            the next message is treated as the end of input; the same
            failure inside a checkpoint exchange is fatal.
        """

        try:
            try:
                line = self.transport.read_line()
            except (TransportError, OSError) as e:
                logger.info("input failed, treating as end of stream: %s", e)
                return False

            if line is None:
                return False

            message = wire.decode(line)
            self.dispatch(message)
        except Exception as e:
            self.transport.write_error('Uncaught exception: ' + str(e), e)
            raise

        return True


    def dispatch(self, message):
        """ Invoke the callback for *message* and acknowledge it.
        """

        if self.state != fields.IDLE:
            raise RuntimeError('cannot dispatch ' + message.kind + ' while ' + self.state)

        method, input = self._route(message)
        logger.debug("dispatching %s", message.kind)

        self.state = fields.DISPATCHING
        self.thread = threading.get_ident()
        try:
            method(input)
        finally:
            self.state = fields.IDLE
            self.thread = None

        status = factory.status_for(message)
        self.transport.write_line(wire.encode(status))


    def _route(self, message):
        """ Return the processor method and input object for *message*.
            Only messages the coordinator may legally send outside of a
            checkpoint exchange can be routed.
        """

        processor = self.processor
        checkpointer = self.checkpointer

        if isinstance(message, Initialize):
            input = processors.InitializationInput(message.shard_id, message.sequence_number, message.sub_sequence_number)
            return processor.initialize, input

        elif isinstance(message, ProcessRecords):
            input = processors.ProcessRecordsInput(message.records, checkpointer, message.millis_behind_latest)
            return processor.process_records, input

        elif isinstance(message, LeaseLost):
            return processor.lease_lost, processors.LeaseLostInput()

        elif isinstance(message, ShardEnded):
            return processor.shard_ended, processors.ShardEndedInput(checkpointer)

        elif isinstance(message, ShutdownRequested):
            return processor.shutdown_requested, processors.ShutdownRequestedInput(checkpointer)

        # Checkpoint responses are only consumed by the Checkpointer, and
        # status messages only ever flow from the bridge to the coordinator.

        raise MalformedMessage(wire.encode(message), reason='unexpected ' + message.kind + ' message')


# end of class Dispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
