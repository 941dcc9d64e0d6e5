import logging
import pytest
import threading

import kclbridge
from kclbridge.checkpoint import RetryingCheckpointErrorHandler
from kclbridge.protocol import factory, fields
from kclbridge.protocol.message import Checkpoint, Initialize, MalformedMessage, Status
from kclbridge.transport import TransportClosed

from conftest import FailingInput, Processor


def dispatching(s):
    """ Return a dispatcher for the streams *s*, in the state it would be in
        while a callback is running.
    """

    dispatcher = kclbridge.Dispatcher(Processor(), s.transport)
    dispatcher.state = fields.DISPATCHING
    dispatcher.thread = threading.get_ident()
    return dispatcher


class Handler:

    def __init__(self):
        self.calls = list()

    def __call__(self, sequence_number, error, checkpointer):
        self.calls.append((sequence_number, error, checkpointer))


def test_success(streams):

    s = streams(factory.checkpoint('456'))
    dispatcher = dispatching(s)
    handler = Handler()

    dispatcher.checkpointer.checkpoint('456', handler)

    assert s.output_messages() == [Checkpoint(sequence_number='456')]
    assert handler.calls == []
    assert dispatcher.state == fields.DISPATCHING


def test_record_and_default(streams):

    s = streams(factory.checkpoint('456'), factory.checkpoint())
    dispatcher = dispatching(s)

    dispatcher.checkpointer.checkpoint(factory.record('456', 'cat', 'meow'))
    dispatcher.checkpointer.checkpoint()

    assert s.output_messages() == [Checkpoint(sequence_number='456'), Checkpoint(sequence_number=None)]


def test_error_with_handler(streams):

    s = streams(factory.checkpoint('456', error='badstuff'))
    dispatcher = dispatching(s)
    handler = Handler()

    dispatcher.checkpointer.checkpoint('456', handler)

    assert handler.calls == [('456', 'badstuff', dispatcher.checkpointer)]


def test_error_without_handler(streams, caplog):
    """ A failed checkpoint is never raised; without a handler it is logged
        and otherwise ignored.
    """

    s = streams(factory.checkpoint(None, error='badstuff'))
    dispatcher = dispatching(s)

    with caplog.at_level(logging.WARNING, logger='kclbridge'):
        dispatcher.checkpointer.checkpoint()

    assert 'badstuff' in caplog.text


def test_empty_error(streams):

    s = streams('{"action":"checkpoint","sequenceNumber":"456","error":""}')
    dispatcher = dispatching(s)
    handler = Handler()

    dispatcher.checkpointer.checkpoint('456', handler)

    assert handler.calls == []


def test_unexpected_response(streams):
    """ Anything other than a checkpoint response is reported as a checkpoint
        failure. The line is consumed, not put back for the dispatcher.
    """

    s = streams(Initialize(shard_id='0'), factory.checkpoint('456'))
    dispatcher = dispatching(s)
    handler = Handler()

    dispatcher.checkpointer.checkpoint('456', handler)

    assert len(handler.calls) == 1
    sequence_number, error, checkpointer = handler.calls[0]
    assert sequence_number == '456'
    assert 'unexpected response type initialize' == error
    assert checkpointer is dispatcher.checkpointer

    assert s.transport.read_line() == '{"action":"checkpoint","sequenceNumber":"456","error":null}'


def test_unexpected_response_without_handler(streams):

    s = streams(Status(response_for='initialize'))
    dispatcher = dispatching(s)

    dispatcher.checkpointer.checkpoint('456')
    assert s.transport.read_line() is None


def test_end_of_input(streams):

    s = streams()
    dispatcher = dispatching(s)

    with pytest.raises(TransportClosed):
        dispatcher.checkpointer.checkpoint('456', Handler())

    assert s.output_messages() == [Checkpoint(sequence_number='456')]


def test_malformed_response(streams):

    s = streams('gibberish')
    dispatcher = dispatching(s)

    with pytest.raises(MalformedMessage):
        dispatcher.checkpointer.checkpoint('456', Handler())


def test_broken_input(streams):

    s = streams()
    s.transport.input = FailingInput()
    dispatcher = dispatching(s)

    with pytest.raises(TransportClosed) as caught:
        dispatcher.checkpointer.checkpoint('456', Handler())

    assert isinstance(caught.value.__cause__, OSError)
    assert s.output_messages() == [Checkpoint(sequence_number='456')]
    assert dispatcher.state == fields.DISPATCHING


def test_closed_input(streams):

    s = streams(factory.checkpoint('456'))
    s.input.close()
    dispatcher = dispatching(s)

    with pytest.raises(TransportClosed):
        dispatcher.checkpointer.checkpoint('456', Handler())


def test_invalid_utf8_response(streams):

    s = streams(b'{"action":"checkpoint","sequenceNumber":"\xff"}')
    dispatcher = dispatching(s)
    handler = Handler()

    with pytest.raises(MalformedMessage):
        dispatcher.checkpointer.checkpoint('456', handler)

    assert handler.calls == []


def test_other_thread(streams):
    """ Only the thread running the callback owns the transport; a request
        from anywhere else would interleave with the dispatcher's reads.
    """

    s = streams(factory.checkpoint('456'))
    dispatcher = dispatching(s)
    errors = list()

    def request():
        try:
            dispatcher.checkpointer.checkpoint('456')
        except RuntimeError as e:
            errors.append(e)

    thread = threading.Thread(target=request)
    thread.start()
    thread.join()

    assert len(errors) == 1
    assert s.output_lines() == []
    assert s.transport.read_line() is not None


def test_outside_callback(streams):

    s = streams(factory.checkpoint('456'))
    dispatcher = kclbridge.Dispatcher(Processor(), s.transport)

    with pytest.raises(RuntimeError):
        dispatcher.checkpointer.checkpoint('456')

    assert s.output_lines() == []


def test_awaiting_state(streams):

    s = streams(factory.checkpoint('456'))
    dispatcher = dispatching(s)
    states = list()

    read_line = s.transport.read_line

    def recording_read_line():
        states.append(dispatcher.state)
        return read_line()

    s.transport.read_line = recording_read_line
    dispatcher.checkpointer.checkpoint('456')

    assert states == [fields.AWAITING_CHECKPOINT]
    assert dispatcher.state == fields.DISPATCHING


def test_retry_budget(streams):
    """ A budget of N retries yields exactly N + 1 requests when every
        attempt fails.
    """

    retries = 3
    failures = [factory.checkpoint('456', error='oh noes')] * (retries + 2)

    s = streams(*failures)
    dispatcher = dispatching(s)

    dispatcher.checkpointer.checkpoint('456', RetryingCheckpointErrorHandler(retries, 0))

    assert s.output_messages() == [Checkpoint(sequence_number='456')] * (retries + 1)

    # The last failure was never requested, so it is still waiting.
    assert s.transport.read_line() is not None
    assert s.transport.read_line() is None


def test_retry_success(streams):

    s = streams(factory.checkpoint(None, error='oh noes'), factory.checkpoint())
    dispatcher = dispatching(s)

    dispatcher.checkpointer.checkpoint(None, RetryingCheckpointErrorHandler(5, 0))

    assert s.output_messages() == [Checkpoint(), Checkpoint()]


def test_retry_zero(streams):

    s = streams(factory.checkpoint('1', error='oh noes'))
    dispatcher = dispatching(s)

    dispatcher.checkpointer.checkpoint('1', RetryingCheckpointErrorHandler(0))

    assert len(s.output_lines()) == 1


def test_retry_delay(streams, monkeypatch):

    delays = list()
    monkeypatch.setattr(kclbridge.checkpoint.time, 'sleep', delays.append)

    s = streams(*[factory.checkpoint('1', error='oh noes')] * 3)
    dispatcher = dispatching(s)

    dispatcher.checkpointer.checkpoint('1', RetryingCheckpointErrorHandler(2, 1.5))

    assert delays == [1.5, 1.5]
    assert len(s.output_lines()) == 3


def test_retry_handler_state():

    handler = RetryingCheckpointErrorHandler(3, 0.25)
    smaller = handler.decremented()

    assert smaller.retries == 2
    assert smaller.delay == 0.25
    assert handler.retries == 3
    assert repr(smaller) == 'RetryingCheckpointErrorHandler(retries=2, delay=0.25)'

    with pytest.raises(ValueError):
        RetryingCheckpointErrorHandler(-1)

    with pytest.raises(ValueError):
        RetryingCheckpointErrorHandler(1, -0.5)


def test_retry_from_environment(monkeypatch):

    monkeypatch.setenv('KCLBRIDGE_CHECKPOINT_RETRIES', '4')
    monkeypatch.setenv('KCLBRIDGE_CHECKPOINT_DELAY', '0.5')

    handler = RetryingCheckpointErrorHandler.from_environment()
    assert handler.retries == 4
    assert handler.delay == 0.5


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
