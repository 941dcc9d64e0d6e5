""" Python implementation of the multi-language record processing protocol.
    A record processor runs as a child process of the coordinator, which
    delivers lifecycle events and batches of records over standard input
    and collects acknowledgements and checkpoints over standard output.
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Submodules used by multiple other components.

from . import config
from . import protocol
from . import transport

# Primary public-facing interfaces.

from .checkpoint import Checkpointer, RetryingCheckpointErrorHandler
from .dispatcher import Dispatcher
from .processor import (
    InitializationInput,
    LeaseLostInput,
    ProcessRecordsInput,
    RecordProcessor,
    ShardEndedInput,
    ShardRecordProcessor,
    ShutdownInput,
    ShutdownReason,
    ShutdownRequestedInput,
)
from .protocol.message import MalformedMessage, Record


def create(processor, transport=None):
    """ Return a :class:`Dispatcher` for *processor*, which may implement
        either the current or the legacy callback surface. The *transport*
        defaults to the standard streams of this process.
    """

    return Dispatcher(processor, transport)


def run(processor, transport=None):
    """ Create a :class:`Dispatcher` and run it until the coordinator closes
        the input stream.
    """

    create(processor, transport).run()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
