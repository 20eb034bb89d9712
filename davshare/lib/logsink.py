"""
logsink.py
----------

leveled (component, level, message) logging used by the request
handlers, backed by the logging module.

"""

import logging

LEVELS = {'debug': logging.DEBUG,
          'info': logging.INFO,
          'warn': logging.WARNING,
          'warning': logging.WARNING,
          'error': logging.ERROR,
          'critical': logging.CRITICAL}


class LogSink:
    """ Writes each message to the logger davshare.<component> """

    def __init__(self, enabled=True, prefix='davshare'):
        self.enabled = enabled
        self.prefix = prefix

    def log(self, component, level, message):
        if not self.enabled:
            return
        if isinstance(level, str):
            level = LEVELS[level.lower()]
        logging.getLogger('%s.%s' % (self.prefix, component.lower())).log(level, message)

    def debug(self, component, message):
        self.log(component, logging.DEBUG, message)

    def info(self, component, message):
        self.log(component, logging.INFO, message)

    def warn(self, component, message):
        self.log(component, logging.WARNING, message)

    def error(self, component, message):
        self.log(component, logging.ERROR, message)
