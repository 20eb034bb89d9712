#!/usr/bin/env python

"""
Python WebDAV Server.

Standalone server sharing one directory over WebDAV.

"""

import getopt, sys, os
import logging
import threading
from http.server import ThreadingHTTPServer

logging.basicConfig(level=logging.WARNING)
log = logging.getLogger('davshare')

from davshare.lib import VERSION, AUTHOR
__version__ = VERSION
__author__  = AUTHOR

from davshare.lib.WebDAVServer import DAVRequestHandler
from davshare.lib.INI_Parse import Configuration, setupDummyConfig
from davshare.lib.auth import BasicAuthenticator, credentials_from_config
from davshare.lib.constants import BUFFER_SIZE, CONNECTION_TIMEOUT, DEFAULT_REALM
from davshare.lib.ipfilter import parse_whitelist
from davshare.lib.logsink import LogSink, LEVELS
from davshare.server.fshandler import FilesystemHandler

# server states
STOPPED = 'stopped'
STARTING = 'starting'
RUNNING = 'running'
STOPPING = 'stopping'


class DAVServer:
    """ Owns one listening WebDAV server and its serving thread

    Stopped -> Starting -> Running -> Stopping -> Stopped

    All transitions happen under one lock. Starting a running server
    stops the old listener first so that two listeners never bind the
    same port.
    """

    def __init__(self, directory, config, host='localhost', sink=None,
                 handler=DAVRequestHandler):
        self.directory = directory
        self.config = config
        self.host = host
        self.sink = sink or LogSink(enabled=self._enable_logging(config))
        self.handler = handler

        self.state = STOPPED
        self._lock = threading.Lock()
        self._httpd = None
        self._thread = None

    @staticmethod
    def _enable_logging(config):
        if 'enable_logging' in config.DAV:
            return config.DAV.getboolean('enable_logging')
        return True

    @property
    def is_running(self):
        return self.state == RUNNING

    @property
    def port(self):
        """ the bound port, useful after starting on port 0 """
        if self._httpd is None:
            return None
        return self._httpd.server_address[1]

    def make_handler(self, timeout):
        """ a request handler class carrying this server's snapshot """
        dv = self.config.DAV
        iface = FilesystemHandler(self.directory,
                                  mimecheck=dv.getboolean('mimecheck') if 'mimecheck' in dv else True,
                                  buffer_size=dv.getint('buffer_size', BUFFER_SIZE))
        authenticator = BasicAuthenticator(credentials_from_config(dv),
                                           dv.get('realm', DEFAULT_REALM))

        return type('BoundDAVRequestHandler', (self.handler,), {
            'IFACE_CLASS': iface,
            'AUTHENTICATOR': authenticator,
            'WHITELIST': parse_whitelist(dv.get('ip_whitelist', '')),
            'SINK': self.sink,
            'timeout': timeout,
        })

    def start(self, port, timeout_millis=CONNECTION_TIMEOUT * 1000):
        """ bind to port and serve in a background thread """
        with self._lock:
            if self.state != STOPPED:
                self._stop()

            self.state = STARTING
            try:
                handler = self.make_handler(timeout_millis / 1000.0 if timeout_millis else None)
                httpd = ThreadingHTTPServer((self.host, port), handler)
            except Exception as e:
                self.state = STOPPED
                self.sink.error('Server', 'Failed to start WebDAV server: %s' % e)
                raise

            httpd.daemon_threads = True
            self._httpd = httpd
            self._thread = threading.Thread(target=httpd.serve_forever,
                                            name='davshare-%d' % self.port,
                                            daemon=True)
            self._thread.start()
            self.state = RUNNING

        self.sink.info('Server', 'WebDAV server listening on %s:%d serving %s' % (
            self.host, self.port, self.directory))

    def stop(self):
        with self._lock:
            self._stop()

    def _stop(self):
        if self.state == STOPPED:
            return

        self.state = STOPPING
        try:
            if self._httpd is not None:
                self._httpd.shutdown()
                self._httpd.server_close()
            if self._thread is not None:
                self._thread.join()
        finally:
            self._httpd = None
            self._thread = None
            self.state = STOPPED

        self.sink.info('Server', 'WebDAV server stopped')

    def wait(self):
        """ block until the server thread ends """
        thread = self._thread
        if thread is not None:
            while thread.is_alive():
                thread.join(0.5)


def runserver(
         port = 8008, host='localhost',
         directory='/tmp',
         config=None):

    directory = directory.strip()
    directory = directory.rstrip('/') or '/'
    host = host.strip()

    if not os.path.isdir(directory):
        log.error('%s is not a valid directory!' % directory)
        return sys.exit(233)

    # basic checks against wrong hosts
    if host.find('/') != -1 or host.find(':') != -1:
        log.error('Malformed host %s' % host)
        return sys.exit(233)

    # no root directory
    if directory == '/':
        log.error('Root directory not allowed!')
        sys.exit(233)

    dv = config.DAV
    if dv.getboolean('noauth'):
        log.warning('Authentication disabled!')

    log.info('Serving data from %s' % directory)

    if dv.getboolean('mimecheck') is False:
        log.info('Disabled mimetype guessing (unknown extensions will be application/octet-stream)')

    server = DAVServer(directory, config, host=host)
    server.start(port, dv.getint('connection_timeout', CONNECTION_TIMEOUT) * 1000)
    print('Listening on %s (%i)' % (host, server.port))

    try:
        server.wait()
    except KeyboardInterrupt:
        log.info('Killed by user')
    finally:
        server.stop()

usage = """davshare server (version %s)
Standalone WebDAV server

Usage: davshare [OPTIONS]
Parameters:
    -c, --config    Specify a file where configuration is specified. In this
                    file you can specify options for a running server.
                    Options go into a [DAV] section.
    -D, --directory Directory where to serve data from
                    The user that runs this server must have permissions
                    on that directory. NEVER run as root!
                    Default directory is /tmp
    -H, --host      Host where to listen on (default: localhost)
    -P, --port      Port to bind server to  (default: 8008)
    -u, --user      Username for authentication
    -p, --password  Password for given user
    -n, --noauth    Pass parameter if server should not ask for authentication
                    This means that every user has access
    -M, --nomime    Only use the builtin extension table for content types.
    -t, --timeout   Connection read timeout in seconds (default: 30)
    -b, --buffer    Transfer buffer size in bytes (default: 8192)
    -w, --whitelist Comma separated addresses or CIDR ranges allowed to
                    connect (default: everybody)
    -v, --verbose   Be verbose
    -l, --loglevel  Select the log level : DEBUG, INFO, WARNING, ERROR, CRITICAL
                    Default is WARNING
    -h, --help      Show this screen

Please send bug reports and feature requests to %s
""" % (__version__, __author__)

def run():
    verbose = False
    directory = '/tmp'
    port = 8008
    host = 'localhost'
    noauth = False
    user = ''
    password = ''
    configfile = ''
    mimecheck = True
    loglevel = 'warning'
    timeout = CONNECTION_TIMEOUT
    buffer_size = BUFFER_SIZE
    whitelist = ''

    # parse commandline
    try:
        opts, args = getopt.getopt(sys.argv[1:], 'P:D:H:u:p:nvhc:Ml:t:b:w:',
                ['host=', 'port=', 'directory=', 'user=', 'password=',
                 'noauth', 'help', 'verbose', 'config=', 'nomime',
                 'loglevel=', 'timeout=', 'buffer=', 'whitelist='])
    except getopt.GetoptError as e:
        print(usage)
        print('>>>> ERROR: %s' % str(e))
        sys.exit(2)

    for o,a in opts:
        if o in ['-M', '--nomime']:
            mimecheck = False

        if o in ['-c', '--config']:
            configfile = a

        if o in ['-D', '--directory']:
            directory = a

        if o in ['-H', '--host']:
            host = a

        if o in ['-P', '--port']:
            port = a

        if o in ['-v', '--verbose']:
            verbose = True

        if o in ['-l', '--loglevel']:
            loglevel = a.lower()

        if o in ['-h', '--help']:
            print(usage)
            sys.exit(2)

        if o in ['-n', '--noauth']:
            noauth = True

        if o in ['-u', '--user']:
            user = a

        if o in ['-p', '--password']:
            password = a

        if o in ['-t', '--timeout']:
            timeout = a

        if o in ['-b', '--buffer']:
            buffer_size = a

        if o in ['-w', '--whitelist']:
            whitelist = a

    if configfile != '':
        log.info('Reading configuration from %s' % configfile)
        conf = Configuration(configfile)

        dv = conf.DAV
        if dv is None:
            print('>> ERROR: %s has no [DAV] section' % configfile, file=sys.stderr)
            sys.exit(3)

        verbose = dv.getboolean('verbose')
        loglevel = dv.get('loglevel', loglevel).lower()
        directory = dv.get('directory', directory)
        port = dv.get('port', port)
        host = dv.get('host', host)
        noauth = dv.getboolean('noauth')
        user = dv.get('user', user)

    else:

        _dc = { 'verbose' : verbose,
                'directory' : directory,
                'port' : port,
                'host' : host,
                'noauth' : noauth,
                'user' : user,
                'password' : password,
                'mimecheck' : mimecheck,
                'connection_timeout' : timeout,
                'buffer_size' : buffer_size,
                'ip_whitelist' : whitelist,
                'enable_logging' : True}

        conf = setupDummyConfig(**_dc)

    if loglevel not in LEVELS:
        print(usage)
        print('>>>> ERROR: unknown log level %s' % loglevel)
        sys.exit(2)

    if verbose and (LEVELS[loglevel] > LEVELS['info']):
        loglevel = 'info'

    logging.getLogger().setLevel(LEVELS[loglevel])

    log.info('Starting up davshare server (version %s)' % __version__)

    if not noauth and not user:
        print(usage)
        print('>> ERROR: No usable parameter specified!', file=sys.stderr)
        print('>> Example: davshare -D /home/files -n', file=sys.stderr)
        sys.exit(3)

    if isinstance(port, str):
        port = int(port.strip())

    runserver(port, host, directory, config=conf)

if __name__ == '__main__':
    run()
