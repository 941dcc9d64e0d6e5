import io
import pytest

import kclbridge
from kclbridge.protocol import wire


class FlushCountingIO(io.BytesIO):

    def __init__(self, *args, **kwargs):
        io.BytesIO.__init__(self, *args, **kwargs)
        self.flushes = 0

    def flush(self):
        self.flushes += 1
        io.BytesIO.flush(self)


class Streams:
    """ In-memory stand-ins for the standard streams the coordinator would
        otherwise be attached to. Each item in *lines* is either a raw string,
        raw bytes, or a protocol message, which is encoded first.
    """

    def __init__(self, lines):

        encoded = list()
        for line in lines:
            if isinstance(line, kclbridge.protocol.Message):
                line = wire.encode(line)
            if isinstance(line, str):
                line = line.encode('utf-8')
            encoded.append(line + b'\n')

        self.input = io.BytesIO(b''.join(encoded))
        self.output = FlushCountingIO()
        self.error = io.BytesIO()
        self.transport = kclbridge.transport.StdioTransport(self.input, self.output, self.error)


    def output_lines(self):
        text = self.output.getvalue().decode('utf-8')
        return [line for line in text.split('\n') if line != '']


    def output_messages(self):
        return [wire.decode(line) for line in self.output_lines()]


    def error_text(self):
        return self.error.getvalue().decode('utf-8')


class FailingInput(io.BytesIO):
    """ An input stream that fails with :class:`OSError` once its contents
        are exhausted, the way a broken pipe would.
    """

    def readline(self, *args):
        line = io.BytesIO.readline(self, *args)
        if line == b'':
            raise OSError('broken pipe')
        return line


class Processor(kclbridge.ShardRecordProcessor):
    """ A processor that records every callback, and optionally runs a
        supplied function for each one.
    """

    def __init__(self, **functions):
        self.functions = functions
        self.calls = list()

    def _call(self, name, input):
        self.calls.append((name, input))
        function = self.functions.get(name)
        if function is not None:
            function(input)

    def initialize(self, input):
        self._call('initialize', input)

    def process_records(self, input):
        self._call('process_records', input)

    def lease_lost(self, input):
        self._call('lease_lost', input)

    def shard_ended(self, input):
        self._call('shard_ended', input)

    def shutdown_requested(self, input):
        self._call('shutdown_requested', input)


class LegacyProcessor(kclbridge.RecordProcessor):

    def __init__(self, **functions):
        self.functions = functions
        self.calls = list()

    def _call(self, name, input):
        self.calls.append((name, input))
        function = self.functions.get(name)
        if function is not None:
            function(input)

    def initialize(self, input):
        self._call('initialize', input)

    def process_records(self, input):
        self._call('process_records', input)

    def shutdown(self, input):
        self._call('shutdown', input)


class ProcessorFailure(Exception):
    pass


@pytest.fixture
def streams():
    """ Return a factory for :class:`Streams` instances.
    """

    def make(*lines):
        return Streams(lines)

    return make


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
