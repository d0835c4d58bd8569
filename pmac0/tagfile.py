"""
Tag persistence.

A tag file holds a single unsigned 64-bit integer in decimal followed by a
newline. Keys, variant and worker count are not stored: they are
deployment configuration and must match between signing and verifying.
"""

import os
from pathlib import Path
from typing import Union

from .crypto import WORD_MASK
from .errors import TagFileError

TAG_SUFFIX = ".tag"

PathLike = Union[str, os.PathLike]


def default_tag_path(target: PathLike) -> Path:
    """Tag file written next to the target: <target>.tag"""
    return Path(str(os.fspath(target)) + TAG_SUFFIX)


def format_tag(tag: int) -> str:
    if not 0 <= tag <= WORD_MASK:
        raise ValueError(f"Tag out of 64-bit range: {tag}")
    return f"{tag}\n"


def parse_tag(text: str) -> int:
    """
    Parse tag file content.

    Surrounding whitespace is ignored; anything else that is not a single
    unsigned 64-bit decimal integer is rejected.

    Raises:
        TagFileError: On malformed content
    """
    token = text.strip()
    if not token.isdigit() or not token.isascii():
        raise TagFileError(f"Malformed tag: {token[:32]!r}")
    tag = int(token)
    if tag > WORD_MASK:
        raise TagFileError(f"Tag exceeds 64 bits: {token}")
    return tag


def write_tag(path: PathLike, tag: int) -> Path:
    """
    Write a tag file atomically.

    Uses the temp file + fsync + rename pattern so a reader never sees a
    partially written tag.

    Returns:
        Path: The written tag file

    Raises:
        TagFileError: If the file cannot be written
    """
    path = Path(path)
    content = format_tag(tag)
    temp_path = path.with_name(path.name + ".tmp")

    try:
        with open(temp_path, "w") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except OSError as e:
        if temp_path.exists():
            temp_path.unlink()
        raise TagFileError(f"Failed to open tag file for writing: {path}: {e}") from e

    return path


def read_tag(path: PathLike) -> int:
    """
    Read a tag file.

    Raises:
        TagFileError: If the file is missing, unreadable or malformed
    """
    try:
        with open(path, "r", encoding="ascii") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise TagFileError(f"Failed to open tag file for reading: {path}: {e}") from e

    return parse_tag(text)
