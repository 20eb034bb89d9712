import os
import textwrap
import logging
import mimetypes
import urllib.parse
from html import escape

from davshare.lib.constants import BUFFER_SIZE, MIME_TYPES, DEFAULT_CONTENT_TYPE
from davshare.lib.errors import DAV_Forbidden, DAV_NotFound, DAV_AlreadyExists
from davshare.lib.davcmd import copytree, movetree, deltree
from davshare.lib.resolver import PathResolver
from davshare.lib.utils import rfc1123_date

log = logging.getLogger(__name__)


class FileStream:
    """ iterate over an open file in chunks of buffer_size bytes """

    def __init__(self, fp, file_size, buffer_size=BUFFER_SIZE):
        self.__fp = fp
        self.__file_size = file_size
        self.__buffer_size = buffer_size

    def __len__(self):
        return self.__file_size

    def __iter__(self):
        try:
            while True:
                data = self.__fp.read(self.__buffer_size)
                if not data:
                    break
                yield data
        finally:
            self.__fp.close()

    def close(self):
        self.__fp.close()


class Resource:
    """ what we know about one file or directory

    Resources are built per request and never cached.
    """

    def __init__(self, path, relpath, is_collection, size, lastmodified, content_type):
        self.path = path
        self.relpath = relpath
        self.is_collection = is_collection
        self.size = size
        self.lastmodified = lastmodified
        self.content_type = content_type

    @property
    def displayname(self):
        return os.path.basename(self.path)

    @property
    def etag(self):
        return '"%d-%d"' % (int(self.lastmodified * 1000), self.size or 0)

    def __repr__(self):
        return '<Resource %s%s>' % (self.relpath, '/' if self.is_collection else '')


def content_type_for(name, mimecheck=True):
    """ find the content type by extension

    Known extensions are looked up in MIME_TYPES (case insensitive),
    everything else falls back to the mimetypes module if mimecheck is
    enabled and finally to application/octet-stream.
    """
    ext = name.rsplit('.', 1)[1].lower() if '.' in name else ''
    if ext in MIME_TYPES:
        return MIME_TYPES[ext]

    if mimecheck:
        ret, encoding = mimetypes.guess_type(name)
        if ret:
            return ret

    return DEFAULT_CONTENT_TYPE


class FilesystemHandler:
    """
    Model a filesystem for DAV

    This class models a regular filesystem for the DAV server

    The basic URL will be http://localhost/
    And the underlying filesystem will be /tmp

    Thus http://localhost/gfx/pix will lead
    to /tmp/gfx/pix

    """

    def __init__(self, directory, mimecheck=True, buffer_size=BUFFER_SIZE):
        self.setDirectory(directory)
        self.mimecheck = mimecheck
        self.buffer_size = buffer_size
        log.info('Initialized with %s' % self.directory)

    def setDirectory(self, path):
        """ Sets the directory """

        if not os.path.isdir(path):
            raise Exception('%s must be a directory!' % path)

        self.resolver = PathResolver(path)
        self.directory = self.resolver.directory

    def uri2local(self, uri):
        """ map a raw request uri to a local filename inside the root """
        return self.resolver.resolve(uri)

    def path2local(self, path):
        """ map a decoded uri path (e.g. from a Destination) to a local filename """
        return self.resolver.resolve_path(path)

    def is_root(self, filename):
        return self.resolver.is_root(filename)

    def exists(self, filename):
        return os.path.exists(filename)

    def get_resource(self, filename):
        """ return the Resource for filename or raise DAV_NotFound """
        try:
            st = os.stat(filename)
        except FileNotFoundError:
            raise DAV_NotFound('File not found')
        except NotADirectoryError:
            raise DAV_NotFound('File not found')

        is_collection = os.path.isdir(filename)
        return Resource(
            filename,
            self.resolver.relative(filename),
            is_collection,
            None if is_collection else st.st_size,
            st.st_mtime,
            None if is_collection else content_type_for(filename, self.mimecheck),
        )

    def get_childs(self, filename):
        """ return the Resources directly below the collection filename """
        childs = []
        for name in sorted(os.listdir(filename)):
            try:
                childs.append(self.get_resource(os.path.join(filename, name)))
            except DAV_NotFound:
                # vanished in between or a dangling symlink
                log.debug('get_childs: skipping %s', name)
        return childs

    def _get_listing(self, filename, uri):
        """Return a directory listing similar to http.server's"""

        template = textwrap.dedent("""\
            <html>
                <head><title>Directory listing for {path}</title></head>
                <body>
                    <h1>Directory listing for {path}</h1>
                    <hr>
                    <ul>
                    {items}
                    </ul>
                    <hr>
                </body>
            </html>
            """)
        entries = []
        if not self.is_root(filename):
            entries.append('../')
        for child in self.get_childs(filename):
            entries.append(child.displayname + ('/' if child.is_collection else ''))

        htmlitems = "\n".join(
            '<li><a href="{href}">{name}</a></li>'.format(
                href=escape(urllib.parse.quote(i), quote=True), name=escape(i))
            for i in entries)

        return template.format(items=htmlitems, path=escape(urllib.parse.unquote(uri)))

    def get_data(self, filename):
        """ return the content of a file as FileStream """
        fp = open(filename, 'rb')
        file_size = os.fstat(fp.fileno()).st_size
        log.info('Serving content of %s' % filename)
        return FileStream(fp, file_size, self.buffer_size)

    def put(self, filename, data):
        """ write the chunks of data into filename

        Returns True if the file was newly created. Missing parent
        directories are created first. An I/O error midway leaves the
        partially written file behind, and so does a malformed chunked
        body (DAV_BadRequest raised by the data iterator).
        """
        created = not os.path.exists(filename)

        parent = os.path.dirname(filename)
        if not os.path.isdir(parent):
            os.makedirs(parent)

        written = 0
        with open(filename, 'wb') as fp:
            for chunk in data:
                fp.write(chunk)
                written += len(chunk)

        log.info('put: wrote %d bytes to %s', written, filename)
        return created

    def mkcol(self, filename):
        """ create a new collection (and all missing parents) """
        if os.path.lexists(filename):
            raise DAV_AlreadyExists('Directory already exists')

        os.makedirs(filename)
        log.info('mkcol: created %s', filename)

    def rm(self, filename):
        """ delete a file or collection recursively """
        if not os.path.lexists(filename):
            raise DAV_NotFound('File not found')
        if self.is_root(filename):
            raise DAV_Forbidden('Refusing to delete the root directory')

        deltree(filename)
        log.info('rm: deleted %s', filename)

    def _check_copymove(self, src, dst):
        if not os.path.exists(src):
            raise DAV_NotFound('Source not found')
        if dst == src or dst.startswith(src.rstrip(os.sep) + os.sep):
            raise DAV_Forbidden('Destination lies inside the source')
        # replacing an ancestor would take the source down with it
        if self.is_root(dst) or src.startswith(dst.rstrip(os.sep) + os.sep):
            raise DAV_Forbidden('Source lies inside the destination')

        parent = os.path.dirname(dst)
        if not os.path.isdir(parent):
            os.makedirs(parent)

    def copy(self, src, dst):
        """ copy a file or a whole tree, overwriting dst """
        self._check_copymove(src, dst)
        copytree(src, dst)
        log.info('copy: %s -> %s', src, dst)

    def move(self, src, dst):
        """ move a file or a whole tree """
        self._check_copymove(src, dst)
        movetree(src, dst)
        log.info('move: %s -> %s', src, dst)

    def get_lastmodified(self, resource):
        return rfc1123_date(resource.lastmodified)
