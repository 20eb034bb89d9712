"""

    Exceptions for the DAV server implementation

"""

class DAV_Error(Exception):
    """ in general we can have the following arguments:

    1. the error code
    2. the message sent back in the response body
    """

    def __init__(self, *args):
        if len(args) == 1:
            self.args = (args[0], "")
        else:
            self.args = args

    @property
    def code(self):
        return self.args[0]

    @property
    def message(self):
        return self.args[1]


class DAV_Unauthorized(DAV_Error):
    """ the request carries no valid credentials """

    def __init__(self, *args):
        DAV_Error.__init__(self, 401, *(args or ("Authentication required",)))


class DAV_BadRequest(DAV_Error):
    """ the request is missing something we need, e.g. a Destination """

    def __init__(self, *args):
        DAV_Error.__init__(self, 400, *args)


class DAV_Forbidden(DAV_Error):
    """ a method on a resource is not allowed """

    def __init__(self, *args):
        DAV_Error.__init__(self, 403, *args)


class DAV_NotFound(DAV_Error):
    """ a requested resource was not found """

    def __init__(self, *args):
        DAV_Error.__init__(self, 404, *args)


class DAV_MethodNotAllowed(DAV_Error):
    """ the method is not part of the supported set """

    def __init__(self, *args):
        DAV_Error.__init__(self, 405, *args)


class DAV_AlreadyExists(DAV_MethodNotAllowed):
    """ MKCOL on something that is already there """


class DAV_InternalError(DAV_Error):
    """ any I/O failure while serving the request """

    def __init__(self, *args):
        DAV_Error.__init__(self, 500, *args)
