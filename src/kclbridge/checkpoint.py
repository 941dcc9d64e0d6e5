""" Checkpointing is a synchronous exchange nested inside a callback: the
    bridge writes a checkpoint request and then blocks for the very next
    line from the coordinator, which must be the response. Failures are
    never raised to the caller; they are reported to an optional error
    handler instead, so that any code following a checkpoint call still
    runs.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Union

from . import config
from .protocol import factory, fields, wire
from .protocol.message import Checkpoint, Record
from .transport.base import TransportClosed, TransportError

logger = logging.getLogger(__name__)


# Invoked as handler(sequence_number, error, checkpointer).
CheckpointErrorHandler = Callable[[Optional[str], str, "Checkpointer"], None]


class Checkpointer:
    """ Record processing progress with the coordinator. A
        :class:`Checkpointer` is bound to a single
        :class:`kclbridge.dispatcher.Dispatcher` and borrows its transport
        for the duration of each exchange.

        Checkpoints may only be requested from the thread running the
        callback; the exchange shares the input stream with the dispatcher,
        and a request from any other thread raises :class:`RuntimeError`.
    """

    def __init__(self, dispatcher):
        self.dispatcher = dispatcher


    def checkpoint(self, sequence_number: Union[str, Record, None] = None, error_handler: Optional[CheckpointErrorHandler] = None) -> None:
        """ Checkpoint at *sequence_number*, which may also be a
            :class:`kclbridge.protocol.message.Record`. If no sequence
            number is given the checkpoint is at the last record delivered.

            If the coordinator reports a failure, *error_handler* is invoked
            with the sequence number, the error text, and this checkpointer;
            without a handler the failure is logged and otherwise ignored.
        """

        if isinstance(sequence_number, Record):
            sequence_number = sequence_number.sequence_number

        dispatcher = self.dispatcher

        # Outside of a callback the next line on the input belongs to the
        # dispatcher, not to us.

        if dispatcher.state != fields.DISPATCHING:
            raise RuntimeError('checkpoint requested while ' + dispatcher.state + ', only possible during a callback')

        if dispatcher.thread != threading.get_ident():
            raise RuntimeError('checkpoint requested from a thread other than the one running the callback')

        transport = dispatcher.transport
        request = factory.checkpoint(sequence_number)
        transport.write_line(wire.encode(request))

        dispatcher.state = fields.AWAITING_CHECKPOINT
        try:
            line = transport.read_line()
        except (TransportError, OSError) as e:
            raise TransportClosed('input failed while awaiting a checkpoint response: ' + str(e)) from e
        finally:
            dispatcher.state = fields.DISPATCHING

        if line is None:
            raise TransportClosed('input ended while awaiting a checkpoint response')

        response = wire.decode(line)

        if isinstance(response, Checkpoint):
            if not response.error:
                logger.debug("checkpoint at %s succeeded", sequence_number)
                return
            error = response.error
        else:
            error = 'unexpected response type ' + response.kind

        if error_handler is None:
            logger.warning("checkpoint at %s failed: %s", sequence_number, error)
            return

        error_handler(sequence_number, error, self)


# end of class Checkpointer



class RetryingCheckpointErrorHandler:
    """ A checkpoint error handler that tries again, up to *retries* times,
        sleeping *delay* seconds before each attempt. Each retry is made
        with a new handler carrying one fewer retry; a handler with no
        retries left does nothing.
    """

    def __init__(self, retries: int, delay: float = 0.0):

        retries = int(retries)
        delay = float(delay)

        if retries < 0:
            raise ValueError('retries must be non-negative: ' + str(retries))
        if delay < 0:
            raise ValueError('delay must be non-negative: ' + str(delay))

        self.retries = retries
        self.delay = delay


    def __repr__(self):
        return '%s(retries=%d, delay=%r)' % (type(self).__name__, self.retries, self.delay)


    def __call__(self, sequence_number, error, checkpointer):

        if self.retries <= 0:
            logger.warning("checkpoint at %s failed, no retries left: %s", sequence_number, error)
            return

        logger.info("checkpoint at %s failed, %d retries left: %s", sequence_number, self.retries, error)

        time.sleep(self.delay)
        checkpointer.checkpoint(sequence_number, self.decremented())


    def decremented(self):
        return type(self)(self.retries - 1, self.delay)


    @classmethod
    def from_environment(cls):
        """ Build a handler using the retry count and delay configured in
            the environment; see :mod:`kclbridge.config`.
        """

        return cls(config.checkpoint_retries(), config.checkpoint_delay())


# end of class RetryingCheckpointErrorHandler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
