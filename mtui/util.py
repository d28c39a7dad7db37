#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import asyncio
import logging
from datetime import datetime, timezone

import requests


logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%d/%m/%Y %H:%M:%S'


def format_timestamp(server_timestamp):
    """Format a server timestamp for display.

    Parameters
    ----------
    server_timestamp : `int`
        Milliseconds since the epoch, as sent by the homeserver.

    Returns
    -------
    `str` or `None`
        'DD/MM/YYYY HH:MM:SS' in UTC, `None` if the value cannot be
        converted.

    Examples
    --------
    >>> format_timestamp(0)
    '01/01/1970 00:00:00'
    >>> format_timestamp(None) is None
    True
    """
    if isinstance(server_timestamp, bool) or not isinstance(server_timestamp, (int, float)):
        return None
    try:
        when = datetime.fromtimestamp(server_timestamp / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return when.strftime(TIMESTAMP_FORMAT)


def one_line(text):
    """Collapse whitespace runs (newlines included) into single spaces.

    >>> one_line('a\\n  b\\tc')
    'a b c'
    """
    return ' '.join(str(text).split())


async def get(url, timeout=10):
    """Asynchronous HTTP GET request.

    Parameters
    ----------
    url: `str`
    timeout: `float`, optional

    Returns
    -------
    `requests.Response`
    """
    # requests is blocking, run it in the default executor
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, lambda: requests.get(url, timeout=timeout)
    )
