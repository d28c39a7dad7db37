#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import sys
import json
import logging
from getpass import getpass

from mtui.error import ConfigError


LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

DEFAULT_HOMESERVER = 'https://matrix.org'
DEFAULT_LOG_FILE = 'mtui.log'


def configure_logger(logger,
                     log_file=None,
                     log_format=LOG_FORMAT,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        # The terminal belongs to the UI, keep log output in a file
        handler = logging.FileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(logging.Formatter(log_format))
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def get_log_level(conf):
    """Map the 'log_level' config string to a logging constant

    Raises:
        ConfigError: Unknown level name
    """
    name = str(conf.get('log_level', 'info')).upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ConfigError('unknown log level %r' % conf.get('log_level'))
    return level


def get_password(conf):
    """Password from the config, prompted for when absent"""
    password = conf.get('password')
    if password:
        return password
    return getpass('Password for %s: ' % conf['user'])


def load_config(path):
    """Load and validate a JSON configuration file

    Args:
        path: Path to the config file

    Returns:
        Tuple of (conf, kwargs) where:
            conf: Full configuration dictionary from JSON file
            kwargs: MatrixClient initialization parameters

    Raises:
        ConfigError: Unreadable file, invalid JSON or missing user
    """
    try:
        with open(path, 'r', encoding='utf-8') as fp:
            conf = json.load(fp)
    except OSError as ex:
        raise ConfigError('cannot read %s: %s' % (path, ex))
    except ValueError as ex:
        raise ConfigError('invalid JSON in %s: %s' % (path, ex))

    if not isinstance(conf, dict):
        raise ConfigError('%s must contain a JSON object' % path)
    if not conf.get('user'):
        raise ConfigError('missing "user" in %s' % path)

    # Invitation auto-accept backoff
    invite_retry = conf.get('invite_retry', {})

    return conf, {
        'homeserver': conf.get('homeserver', DEFAULT_HOMESERVER),  # URL or server name
        'user': conf['user'],  # User id or localpart (required)
        'device_name': conf.get('device_name', 'mtui'),
        'invite_initial_delay': invite_retry.get('initial_delay', 2),
        'invite_max_delay': invite_retry.get('max_delay', 3600),
        'sync_timeout': conf.get('sync_timeout', 30000),  # Long-poll timeout (ms)
        'restart_delay': conf.get('restart_delay', 5),  # Delay before restarting sync
        'max_timeouts': conf.get('max_timeouts', 3),  # Request timeouts before failing
    }


def get_config():
    """Load configuration from the JSON file given on the command line

    Sets up file logging as a side effect.

    Returns:
        Tuple of (conf, kwargs), see load_config

    Exits:
        Exits with status 1 on wrong arguments or a bad config file
    """
    if len(sys.argv) != 2:
        print('usage: %s <config file>' % sys.argv[0], file=sys.stderr)
        sys.exit(1)

    try:
        conf, kwargs = load_config(sys.argv[1])
        log_level = get_log_level(conf)
    except ConfigError as ex:
        print('config error: %s' % ex, file=sys.stderr)
        sys.exit(1)

    configure_logger(
        logging.getLogger(),
        log_file=conf.get('log_file', DEFAULT_LOG_FILE),
        log_level=log_level
    )

    return conf, kwargs
