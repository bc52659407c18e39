"""Miscellaneous utilities."""
import logging
import os
import re
import stat
import tempfile

__all__ = ["listify", "split_list", "atomic_write", "configure_logging"]

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def listify(x):
    """
    Returns [] if x is None, a single-item list consisting of x if x is a str or bytes, otherwise returns x.

    listify(None) -> []
    listify("string") -> ["string"]
    listify(b"bytes") -> [b"bytes"]
    listify(["foo", "bar"]) -> ["foo", "bar"]

    :param x: What to listify.
    :return:
    """
    if x is None:
        return []
    if isinstance(x, (str, bytes)):
        return [x]
    return x


def split_list(value, separators=r'[\s,]+'):
    """
    Splits a config value like "alice, bob carol" into ['alice', 'bob', 'carol'].  Empty items are dropped.

    :param value: String to split.  None is treated as empty.
    :param separators: Regular expression matching separators.
    """
    if not value:
        return []
    return [item for item in re.split(separators, value.strip()) if item]


def atomic_write(filename, write):
    """
    Writes a file by writing a temporary file next to it and renaming it over the original.  An existing file keeps
    its permissions.

    :param filename: File to (re)place.
    :param write: Function that receives an open text file and writes the contents.
    """
    directory = os.path.dirname(os.path.abspath(filename))
    fd, tmpname = tempfile.mkstemp(prefix='.' + os.path.basename(filename) + '.', dir=directory)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            write(f)
        if os.path.exists(filename):
            os.chmod(tmpname, stat.S_IMODE(os.stat(filename).st_mode))
        os.replace(tmpname, filename)
    except BaseException:
        try:
            os.unlink(tmpname)
        except OSError:
            pass
        raise


def configure_logging(section):
    """
    Sets up the logging module from a logging config section.

    :param section: Object with `level`, `file` and `format` attributes, e.g. a
        :class:`~bangbot.LoggingConfigSection`.  `file` may be None to log to stderr.
    """
    level = section.level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError("Unknown log level {!r}".format(section.level))
    kwargs = {'level': level, 'format': section.format or DEFAULT_LOG_FORMAT}
    if section.file:
        kwargs['filename'] = section.file
    logging.basicConfig(**kwargs)
