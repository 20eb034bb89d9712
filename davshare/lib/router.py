"""
router.py
---------

maps a request method and the authentication state onto the name of
the request handler method that serves it.

"""

from .errors import DAV_Unauthorized, DAV_MethodNotAllowed

# methods which need a successful authentication first
METHODS = {
    'GET': 'do_GET',
    'PUT': 'do_PUT',
    'DELETE': 'do_DELETE',
    'MKCOL': 'do_MKCOL',
    'PROPFIND': 'do_PROPFIND',
    'PROPPATCH': 'do_PROPPATCH',
    'MOVE': 'do_MOVE',
    'COPY': 'do_COPY',
}

# methods which are served for everybody
PUBLIC_METHODS = {
    'OPTIONS': 'do_OPTIONS',
}


def route(method, authenticated):
    """ return the handler method name for method

    raises DAV_Unauthorized if the method needs authentication which
    did not succeed and DAV_MethodNotAllowed for unknown methods.
    """
    if method in PUBLIC_METHODS:
        return PUBLIC_METHODS[method]

    if not authenticated:
        raise DAV_Unauthorized

    if method not in METHODS:
        raise DAV_MethodNotAllowed('Method not allowed: %s' % method)

    return METHODS[method]
