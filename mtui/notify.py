#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import logging
import shutil
import subprocess


class Notifier:
    """Desktop notifications through ``notify-send``.

    Delivery is best effort: a missing binary or a failing spawn is logged
    and otherwise ignored.

    Attributes
    ----------
    enabled : `bool`
    command : `str`
    icon : `str`
    """
    logger = logging.getLogger(__name__)

    def __init__(self, enabled=True, command='notify-send', icon='matrix'):
        self.enabled = enabled
        self.command = command
        self.icon = icon
        self._path = shutil.which(command) if enabled else None
        if enabled and self._path is None:
            self.logger.info('%s not found, notifications disabled', command)

    def notify(self, summary, body):
        """Show a notification.

        Returns
        -------
        `bool`
            `True` if the notifier process was started.
        """
        if not self.enabled or self._path is None:
            return False
        try:
            subprocess.Popen(
                [self._path, '--icon', self.icon, '--', summary, body],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL
            )
        except (OSError, ValueError) as ex:
            self.logger.warning('notify: %r', ex)
            return False
        return True
