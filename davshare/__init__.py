"""
WebDAV server for sharing a local directory tree.

Serves GET, PUT, DELETE, MKCOL, PROPFIND, PROPPATCH, MOVE, COPY and OPTIONS
on top of a root directory, protected by HTTP Basic authentication.
"""

__version__ = '1.0.0'
__author__ = 'davshare developers'
__email__ = 'davshare@users.noreply.github.com'
__license__ = 'GPL v2'
