"""Authenticating HTTP Server

This module builds on BaseHTTPServer. It normalizes the request
headers, checks the client address and the Basic credentials and
routes the request to one of the do_* methods. Every response gets
the DAV and CORS headers.

"""

import logging
import socket
from http.server import BaseHTTPRequestHandler

from .auth import BasicAuthenticator, Credentials
from .constants import DAV_VERSION, CORS_HEADERS
from .errors import DAV_Error, DAV_Forbidden, DAV_InternalError
from .ipfilter import is_allowed
from .logsink import LogSink
from .router import route
from .status import STATUS_CODES

log = logging.getLogger(__name__)


class AuthRequestHandler(BaseHTTPRequestHandler):
    """
    Simple handler that checks for auth headers

    The server injects AUTHENTICATOR (a BasicAuthenticator), WHITELIST
    (ip networks, empty means everybody) and SINK (a LogSink) by
    subclassing, so that every running server has its own snapshot.

    """

    AUTHENTICATOR = BasicAuthenticator(Credentials('', '', False))
    WHITELIST = ()
    SINK = LogSink()

    def handle_one_request(self):
        """ Handle a single HTTP request """
        try:
            self.raw_requestline = self.rfile.readline(65537)
            if len(self.raw_requestline) > 65536:
                self.requestline = ''
                self.request_version = ''
                self.command = ''
                self.send_error(414)
                return
            if not self.raw_requestline:
                self.close_connection = True
                return
            if not self.parse_request():
                # An error code has been sent, just exit
                return
            self.dispatch()
            self.wfile.flush()
        except socket.timeout as e:
            self.log_error("Request timed out: %r", e)
            self.close_connection = True
        except ConnectionError as e:
            log.info('Connection to %s lost: %s', self.address_string(), e)
            self.close_connection = True

    def dispatch(self):
        """ run the gates and call the handler method """
        self.dav_headers = dict((k.lower(), v) for k, v in self.headers.items())
        self._body_consumed = False

        client = self.client_address[0]
        self.SINK.info('Request', 'Client %s accessing %s %s' % (client, self.command, self.path))

        if not is_allowed(client, self.WHITELIST):
            self.SINK.warn('Security', 'IP %s not in whitelist' % client)
            return self.send_dav_error(DAV_Forbidden('IP not allowed'))

        authenticated = self.authenticate()
        try:
            mname = route(self.command, authenticated)
        except DAV_Error as error:
            if error.code == 401:
                self.SINK.warn('Auth', 'Authentication failed for IP %s' % client)
            else:
                self.SINK.warn('WebDAV', 'Unsupported method: %s' % self.command)
            return self.send_dav_error(error)

        try:
            getattr(self, mname)()
        except DAV_Error as error:
            self.send_dav_error(error)
        except ConnectionError as e:
            # the client went away, nobody to answer to
            log.info('%s: connection lost: %s', self.command, e)
            self.close_connection = True
        except OSError as e:
            log.exception('%s %s failed', self.command, self.path)
            self.SINK.error('Server', 'Error processing request from %s: %s' % (client, e))
            self.send_dav_error(DAV_InternalError('Internal server error: %s' % e))

    def authenticate(self):
        """ check the Authorization header of this request """
        return self.AUTHENTICATOR.authenticate(self.dav_headers.get('authorization'))

    def _request_has_body(self):
        headers = getattr(self, 'dav_headers', {})
        if 'chunked' in headers.get('transfer-encoding', '').lower():
            return True
        try:
            return int(headers.get('content-length', '0')) > 0
        except ValueError:
            return True

    def _send_connection_header(self):
        # an unread request body would be parsed as the next request
        if not getattr(self, '_body_consumed', True) and self._request_has_body():
            self.close_connection = True
        if self.close_connection:
            self.send_header('Connection', 'close')

    def end_headers(self):
        """ add the DAV and CORS headers before ending the header block """
        self.send_header('DAV', DAV_VERSION['version'])
        for a, v in CORS_HEADERS:
            self.send_header(a, v)
        BaseHTTPRequestHandler.end_headers(self)

    def send_body(self, data, code, ctype='text/plain; charset=utf-8', headers=None):
        """ send a body in one part """
        if code == 204:
            data = None
        elif isinstance(data, str):
            data = data.encode('utf-8')

        self.send_response(code)
        self._send_connection_header()

        for a, v in (headers or {}).items():
            self.send_header(a, v)

        if data:
            self.send_header('Content-Type', ctype)
            self.send_header('Content-Length', len(data))
        elif code != 204:
            self.send_header('Content-Length', 0)

        self.end_headers()
        if data:
            self.wfile.write(data)

    def send_status(self, code=200, msg=None, headers=None):
        """ send a plain text status message """
        if msg is None:
            msg = STATUS_CODES.get(code, '')
        self.send_body(msg, code, headers=headers)

    def send_dav_error(self, error):
        headers = {}
        if error.code == 401:
            headers['WWW-Authenticate'] = self.AUTHENTICATOR.challenge
        self.send_status(error.code, error.message or None, headers)

    def log_message(self, format, *args):
        log.info("%s - %s", self.address_string(), format % args)
