from importlib import metadata

# try to get version from package (if installed)
try:
    VERSION = metadata.version('davshare')
except metadata.PackageNotFoundError:
    # Not running from installed version
    VERSION = "DEVELOPMENT"

# author hardcoded here
AUTHOR = 'davshare developers <davshare@users.noreply.github.com>'
