# server mode
DAV_VERSION = {
        'version' : '1,2',
        'options' :
        'OPTIONS, GET, PUT, DELETE, PROPFIND, PROPPATCH, MKCOL, COPY, MOVE'
}

# WebDAV namespace
DAV_NAMESPACE = "DAV:"

# headers added to every response
CORS_HEADERS = [
        ('Access-Control-Allow-Origin', '*'),
        ('Access-Control-Allow-Methods', DAV_VERSION['options']),
        ('Access-Control-Allow-Headers',
         'Authorization, Content-Type, Content-Length, Depth, Destination, '
         'Overwrite, User-Agent, X-Requested-With, Cache-Control'),
        ('Access-Control-Expose-Headers', 'DAV'),
]

DEFAULT_REALM = 'WebDAV'

# default transfer buffer for PUT and GET bodies
BUFFER_SIZE = 8192

# transport read timeout in seconds
CONNECTION_TIMEOUT = 30

# largest XML request body we are willing to keep in memory
MAX_XML_BODY = 1024 * 1024

# content types by (lower case) file extension
MIME_TYPES = {
        'html': 'text/html',
        'htm': 'text/html',
        'txt': 'text/plain',
        'css': 'text/css',
        'js': 'application/javascript',
        'json': 'application/json',
        'xml': 'application/xml',
        'jpg': 'image/jpeg',
        'jpeg': 'image/jpeg',
        'png': 'image/png',
        'gif': 'image/gif',
        'pdf': 'application/pdf',
        'zip': 'application/zip',
        'mp4': 'video/mp4',
        'mp3': 'audio/mpeg',
}

DEFAULT_CONTENT_TYPE = 'application/octet-stream'
