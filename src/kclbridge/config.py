""" Runtime configuration, taken from the environment. The bridge is
    launched by the coordinator rather than by a user at a shell, so the
    environment is the one place settings can be reliably passed through.

    ``KCLBRIDGE_LOG_LEVEL``
        Level name or number for :func:`configure_logging`; default WARNING.

    ``KCLBRIDGE_CHECKPOINT_RETRIES``
        Retry budget for
        :meth:`kclbridge.checkpoint.RetryingCheckpointErrorHandler.from_environment`;
        default 10.

    ``KCLBRIDGE_CHECKPOINT_DELAY``
        Seconds to wait between checkpoint retries; default 3.
"""

import logging
import os
import sys

LOG_LEVEL = 'KCLBRIDGE_LOG_LEVEL'
CHECKPOINT_RETRIES = 'KCLBRIDGE_CHECKPOINT_RETRIES'
CHECKPOINT_DELAY = 'KCLBRIDGE_CHECKPOINT_DELAY'

default_log_level = logging.WARNING
default_checkpoint_retries = 10
default_checkpoint_delay = 3.0

log_format = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def log_level():
    """ Return the configured logging level as an integer.
    """

    try:
        value = os.environ[LOG_LEVEL]
    except KeyError:
        return default_log_level

    value = value.strip()

    if value.isdigit():
        return int(value)

    level = logging.getLevelName(value.upper())
    if isinstance(level, int):
        return level

    raise ValueError('invalid %s: %r' % (LOG_LEVEL, value))


def checkpoint_retries():

    try:
        value = os.environ[CHECKPOINT_RETRIES]
    except KeyError:
        return default_checkpoint_retries

    try:
        retries = int(value)
    except ValueError:
        raise ValueError('invalid %s: %r' % (CHECKPOINT_RETRIES, value))

    if retries < 0:
        raise ValueError('invalid %s: %r' % (CHECKPOINT_RETRIES, value))

    return retries


def checkpoint_delay():

    try:
        value = os.environ[CHECKPOINT_DELAY]
    except KeyError:
        return default_checkpoint_delay

    try:
        delay = float(value)
    except ValueError:
        raise ValueError('invalid %s: %r' % (CHECKPOINT_DELAY, value))

    if delay < 0:
        raise ValueError('invalid %s: %r' % (CHECKPOINT_DELAY, value))

    return delay


def configure_logging(level=None, stream=None):
    """ Attach a handler to the ``kclbridge`` logger. Output goes to
        *stream*, which defaults to standard error: standard output carries
        the protocol and must never see a log line. Returns the handler.
    """

    if level is None:
        level = log_level()
    if stream is None:
        stream = sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(log_format))

    logger = logging.getLogger('kclbridge')
    logger.addHandler(handler)
    logger.setLevel(level)

    return handler


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
