
STATUS_CODES={
        200:    "OK",
        201:    "Created",
        204:    "No Content",
        207:    "Multi-Status",
        400:    "Bad Request",
        401:    "Authentication required",
        403:    "Forbidden",
        404:    "Not Found",
        405:    "Method Not Allowed",
        500:    "Internal Server Error",
}
