"""
auth.py
-------

HTTP Basic credential checking against the configured user.

"""

import base64
import binascii
import logging
from collections import namedtuple

from .constants import DEFAULT_REALM

log = logging.getLogger(__name__)

BASIC_PREFIX = 'Basic '

# read-only snapshot taken when the server starts
Credentials = namedtuple('Credentials', ['username', 'password', 'allow_anonymous'])


def credentials_from_config(dv):
    """ build a Credentials snapshot out of the [DAV] config section """
    return Credentials(
        username=dv.get('user', ''),
        password=dv.get('password', ''),
        allow_anonymous=dv.getboolean('noauth'),
    )


def parse_basic(header):
    """ return (user, password) out of a Basic authorization header

    Returns None if the header is not a well formed Basic header.
    """
    if not header or not header.startswith(BASIC_PREFIX):
        return None

    try:
        decoded = base64.b64decode(header[len(BASIC_PREFIX):].strip(), validate=True)
        decoded = decoded.decode('utf-8')
    except (binascii.Error, ValueError):
        return None

    parts = decoded.split(':', 1)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


class BasicAuthenticator:
    """ checks Authorization headers against one Credentials snapshot """

    def __init__(self, credentials, realm=DEFAULT_REALM):
        self.credentials = credentials
        self.realm = realm

    @property
    def challenge(self):
        """ value for the WWW-Authenticate header """
        return 'Basic realm="%s"' % self.realm

    def authenticate(self, header):
        if self.credentials.allow_anonymous:
            return True

        userpass = parse_basic(header)
        if userpass is None:
            log.debug('No usable Basic credentials in request')
            return False

        user, pw = userpass
        return user == self.credentials.username and pw == self.credentials.password
