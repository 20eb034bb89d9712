"""
destination.py
--------------

extracts the target path out of the Destination header of MOVE and
COPY requests.

Clients send anything from a full URL to a bare path, so two strategies
are tried in order: a strict parse of an absolute URL and a permissive
one which simply cuts off scheme and host.

"""

import urllib.parse


def parse_strict(destination):
    """ path of an absolute URL like http://host:port/a/b

    Returns None if destination is not an absolute URL.
    """
    try:
        parts = urllib.parse.urlsplit(destination)
        # accessing port validates it
        parts.port
    except ValueError:
        return None

    if not parts.scheme or not parts.netloc:
        return None

    return urllib.parse.unquote(parts.path or '/', encoding='utf-8')


def parse_permissive(destination):
    """ strip scheme and host[:port] and keep whatever follows """
    rest = destination
    if '://' in rest:
        rest = rest.split('://', 1)[1]
        slash = rest.find('/')
        rest = rest[slash:] if slash >= 0 else '/'
    if not rest.startswith('/'):
        rest = '/' + rest

    rest = rest.split('?', 1)[0].split('#', 1)[0]
    return urllib.parse.unquote(rest, encoding='utf-8')


STRATEGIES = (parse_strict, parse_permissive)


def destination_path(destination):
    """ decoded URI path the Destination header points to """
    for strategy in STRATEGIES:
        path = strategy(destination)
        if path is not None:
            return path
