"""DAV HTTP Server

This module builds on AuthServer and implements the DAV commands
on top of a FilesystemHandler (IFACE_CLASS).

"""
import logging

from .AuthServer import AuthRequestHandler
from .propfind import PROPFIND, finite_depth_error, parse_depth
from .proppatch import PROPPATCH
from .destination import destination_path
from .constants import DAV_VERSION, MAX_XML_BODY
from .errors import DAV_Error, DAV_BadRequest, DAV_NotFound, DAV_InternalError

from davshare import __version__

log = logging.getLogger(__name__)

XML_CONTENT_TYPE = 'application/xml; charset=utf-8'


class DAVRequestHandler(AuthRequestHandler):
    """Simple DAV request handler with

    - GET
    - PUT
    - DELETE
    - OPTIONS
    - PROPFIND
    - PROPPATCH
    - MKCOL
    - COPY
    - MOVE

    It uses the FilesystemHandler given as IFACE_CLASS for serving
    and storing content.

    """

    server_version = "davshare/" + __version__
    protocol_version = "HTTP/1.1"

    # Do not forget to set IFACE_CLASS by caller
    # ex.: IFACE_CLASS = FilesystemHandler('/tmp')
    IFACE_CLASS = None

    def send_stream(self, stream, code, ctype, headers=None):
        """ send a FileStream with a fixed Content-Length """
        try:
            self.send_response(code)
            self._send_connection_header()
            for a, v in (headers or {}).items():
                self.send_header(a, v)
            self.send_header('Content-Type', ctype)
            self.send_header('Content-Length', len(stream))
            self.end_headers()

            sent = 0
            try:
                for buf in stream:
                    self.wfile.write(buf)
                    sent += len(buf)
            except OSError as e:
                # headers are out, all we can do is to hang up
                log.warning('Streaming %s aborted after %d bytes: %s', self.path, sent, e)
                self.close_connection = True
                return

            if sent != len(stream):
                log.warning('%s changed size while streaming (%d of %d bytes)',
                            self.path, sent, len(stream))
                self.close_connection = True
        finally:
            stream.close()

    ### HTTP METHODS called by the server

    def do_OPTIONS(self):
        """return the list of capabilities """

        self.send_body(None, 200, headers={
            'Allow': DAV_VERSION['options'],
            'MS-Author-Via': 'DAV',  # this is for M$
        })

    def do_GET(self):
        """Serve a GET request."""

        dc = self.IFACE_CLASS
        path = dc.uri2local(self.path)
        resource = dc.get_resource(path)

        if resource.is_collection:
            listing = dc._get_listing(path, self.path)
            return self.send_body(listing, 200, 'text/html; charset=utf-8')

        try:
            data = dc.get_data(path)
        except OSError as e:
            raise DAV_InternalError('Error reading file: %s' % e)

        headers = {
            'Last-Modified': dc.get_lastmodified(resource),
            'ETag': resource.etag,
        }
        self.send_stream(data, 200, resource.content_type, headers)

    def do_PUT(self):
        dc = self.IFACE_CLASS
        path = dc.uri2local(self.path)

        log.debug('do_PUT: headers = %s' % self.dav_headers)
        self.SINK.info('WebDAV', 'PUT request for %s, Content-Length: %s' % (
            self.path, self.dav_headers.get('content-length', 'none')))

        try:
            created = dc.put(path, self._read_body(until_eof=True))
        except OSError as e:
            self.SINK.error('WebDAV', 'PUT failed for %s: %s' % (self.path, e))
            raise DAV_InternalError('Error creating file: %s' % e)

        headers = {}
        try:
            headers['ETag'] = dc.get_resource(path).etag
        except DAV_NotFound:
            pass

        self.send_body(None, 201 if created else 204, headers=headers)

    def do_DELETE(self):
        """ delete a resource """

        dc = self.IFACE_CLASS
        path = dc.uri2local(self.path)

        try:
            dc.rm(path)
        except OSError as e:
            self.SINK.error('WebDAV', 'DELETE failed for %s: %s' % (self.path, e))
            raise DAV_InternalError('Error deleting file')

        self.send_body(None, 204)

    def do_MKCOL(self):
        """ create a new collection """

        dc = self.IFACE_CLASS
        path = dc.uri2local(self.path)
        self._read_xml_body()

        try:
            dc.mkcol(path)
        except OSError as e:
            self.SINK.error('WebDAV', 'MKCOL failed for %s: %s' % (self.path, e))
            raise DAV_InternalError('Error creating directory')

        self.SINK.info('WebDAV', 'MKCOL created %s' % self.path)
        self.send_status(201, 'Directory created')

    def do_PROPFIND(self):
        """ Retrieve properties on defined resource. """

        dc = self.IFACE_CLASS
        path = dc.uri2local(self.path)
        self._read_xml_body()

        if not dc.exists(path):
            raise DAV_NotFound('File not found')

        depth = self.dav_headers.get('depth')
        try:
            parse_depth(depth)
        except DAV_Error:
            self.SINK.warn('WebDAV', 'PROPFIND with Depth %s refused for %s' % (depth, self.path))
            return self.send_body(finite_depth_error(), 403, XML_CONTENT_TYPE)

        pf = PROPFIND(self.path, dc, depth)
        self.send_body(pf.createResponse(path), 207, XML_CONTENT_TYPE)

    def do_PROPPATCH(self):
        """ acknowledge property updates, nothing is stored """

        try:
            body = self._read_xml_body()
        except DAV_BadRequest:
            body = None
            self.close_connection = True

        pp = PROPPATCH(self.path, body)
        self.send_body(pp.create_response(), 207, XML_CONTENT_TYPE)

    def do_COPY(self):
        """ copy one resource to another """
        self.copymove(move=False)

    def do_MOVE(self):
        """ move one resource to another """
        self.copymove(move=True)

    def copymove(self, move):
        """ common method for copying or moving objects """
        dc = self.IFACE_CLASS

        destination = self.dav_headers.get('destination')
        if not destination:
            raise DAV_BadRequest('Missing destination')

        source = dc.uri2local(self.path)
        target = dc.path2local(destination_path(destination))

        try:
            if move:
                dc.move(source, target)
            else:
                dc.copy(source, target)
        except OSError as e:
            self.SINK.error('WebDAV', '%s %s -> %s failed: %s' % (
                self.command, self.path, destination, e))
            if move:
                raise DAV_InternalError('Move failed')
            raise DAV_InternalError('Copy failed: %s' % e)

        self.SINK.info('WebDAV', '%s %s -> %s' % (self.command, self.path, destination))
        self.send_body(None, 201)

    ### request bodies

    def _content_length(self):
        """ the declared body length, None if absent or unusable """
        try:
            length = int(self.dav_headers['content-length'])
        except (KeyError, ValueError):
            return None
        if length < 0:
            return None
        return length

    def _read_body(self, until_eof=False):
        """ yield the request body in chunks of at most buffer_size bytes

        A chunked body is decoded. Otherwise a positive Content-Length
        is read exactly. Without a usable Content-Length the body runs
        until the client closes its side if until_eof is set, and is
        taken as empty otherwise.
        """
        bufsize = self.IFACE_CLASS.buffer_size

        if 'chunked' in self.dav_headers.get('transfer-encoding', '').lower():
            yield from self._readChunkedData(bufsize)
        else:
            length = self._content_length()
            if length is None and until_eof:
                # the connection can't be reused after this
                self.close_connection = True
                while True:
                    buf = self.rfile.read(bufsize)
                    if not buf:
                        break
                    yield buf
            elif length:
                while length > 0:
                    buf = self.rfile.read(min(length, bufsize))
                    if not buf:
                        raise IOError('Request body ended %d bytes early' % length)
                    length -= len(buf)
                    yield buf

        self._body_consumed = True

    def _readChunkedData(self, bufsize):
        while True:
            line = self.rfile.readline(65537)
            try:
                l = int(line.split(b';', 1)[0].strip(), 16)
            except ValueError:
                raise DAV_BadRequest('Malformed chunked request body')
            if l <= 0:
                break
            while l > 0:
                buf = self.rfile.read(min(l, bufsize))
                if not buf:
                    raise IOError('Chunked request body ended early')
                l -= len(buf)
                yield buf
            self.rfile.readline()

        # skip trailers
        while True:
            line = self.rfile.readline(65537)
            if line in (b'\r\n', b'\n', b''):
                break

    def _read_xml_body(self):
        """ read a small request body (PROPFIND, PROPPATCH, MKCOL) """
        body = b''
        for buf in self._read_body():
            body += buf
            if len(body) > MAX_XML_BODY:
                raise DAV_BadRequest('Request body too large')
        return body
