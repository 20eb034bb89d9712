"""
resolver.py
-----------

maps request URIs onto the local directory tree and makes sure
nothing outside of the root directory can be reached.

"""

import logging
import os
import urllib.parse

from .errors import DAV_Forbidden

log = logging.getLogger(__name__)


def _below(filename, directory):
    if filename == directory:
        return True
    return filename.startswith(directory.rstrip(os.sep) + os.sep)


class PathResolver:
    """ Map URI paths below the root directory

    The root /srv/dav together with the URI /gfx/pix%20a.png
    resolves to /srv/dav/gfx/pix a.png

    """

    def __init__(self, directory):
        self.directory = os.path.normpath(os.path.abspath(directory))
        self.realdirectory = os.path.realpath(self.directory)

    def resolve(self, uri):
        """ map a raw (percent-encoded) request URI to a local path """
        path = urllib.parse.urlsplit(uri).path
        return self.resolve_path(urllib.parse.unquote(path, encoding='utf-8'))

    def resolve_path(self, path):
        """ map an already decoded URI path to a local path """
        if '\x00' in path:
            raise DAV_Forbidden('Invalid path')

        if path.startswith('/'):
            path = path[1:]

        filename = os.path.normpath(os.path.join(self.directory, path))
        if not self.contains(filename):
            log.warning('Path traversal attempt: %s escapes %s', path, self.directory)
            raise DAV_Forbidden('Invalid path')

        return filename

    def contains(self, filename):
        """ True if filename is the root or lies below it

        Symlinks are resolved as well, so a link inside the root must
        point back into it. For paths which do not exist yet realpath
        resolves the deepest existing ancestor.
        """
        return (_below(filename, self.directory) and
                _below(os.path.realpath(filename), self.realdirectory))

    def is_root(self, filename):
        return filename == self.directory

    def relative(self, filename):
        """ path of filename relative to the root, '' for the root itself """
        if self.is_root(filename):
            return ''
        return os.path.relpath(filename, self.directory)
