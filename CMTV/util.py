from pathlib import Path
from typing import Union


class NoFilenameError(Exception):
    pass


def get_filename(path: Union[str, Path]) -> str:
    """
    Return the last component of *path*, as the file system names it.

    Colons and backslashes are ordinary characters in POSIX file names,
    so they are kept.

    Raises
    ------
    NoFilenameError
        If the path has no final component (for example ``/`` or ``""``).
    """
    name = Path(path).name
    if not name:
        raise NoFilenameError(
            f"Path '{path}' does not contain a file name."
        )

    return name


def file_label(path: Union[str, Path]) -> str:
    """Label used to tag entries read from *path*"""
    try:
        return get_filename(path)
    except NoFilenameError:
        return str(path)
