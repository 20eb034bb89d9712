"""

davcmd.py
---------

containts commands like copy, move, delete for files and
directory trees

"""

import errno
import logging
import os
import shutil

log = logging.getLogger(__name__)

# os.replace refuses to overwrite a directory or mix files and directories
REPLACE_ERRNOS = (errno.ENOTEMPTY, errno.EEXIST, errno.EISDIR, errno.ENOTDIR)


def deltree(path):
    """ delete a file or a whole directory tree """
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)


def copytree(src, dst):
    """ copy a file or a tree of files to dst

    Existing content at dst is overwritten. If dst is of another kind
    than src (file vs. directory) it gets removed first.
    """
    if os.path.lexists(dst) and os.path.isdir(src) != os.path.isdir(dst):
        deltree(dst)

    if os.path.isdir(src):
        shutil.copytree(src, dst, dirs_exist_ok=True)
    else:
        shutil.copy2(src, dst)


def movetree(src, dst):
    """ move a resource

    This is a rename if source and destination live on the same
    device. Otherwise the tree is copied and the original deleted.
    An existing destination directory is replaced as a whole, but only
    after a plain rename refused to overwrite it.
    """
    try:
        os.replace(src, dst)
        return
    except OSError as e:
        if e.errno in REPLACE_ERRNOS and os.path.lexists(dst):
            deltree(dst)
            os.replace(src, dst)
            return
        if e.errno != errno.EXDEV:
            raise

    log.info('movetree: %s and %s are on different devices, copying', src, dst)
    if os.path.isdir(dst) and not os.path.islink(dst):
        deltree(dst)
    copytree(src, dst)
    deltree(src)
