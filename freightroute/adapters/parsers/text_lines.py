"""Line reading shared by the network file readers."""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Sequence, Union

from ...domain.errors import NetworkFileError

# Control characters except tab, which separates train file columns
CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def clean_line(line: str) -> str:
    return CONTROL_CHARACTERS.sub("", line).strip()


def read_clean_lines(path: Union[str, Path], encoding: str, what: str) -> List[str]:
    """Read a text file, strip control characters and drop blank lines.

    Args:
        path: File to read.
        encoding: Text encoding.
        what: Short file description for error messages ("nodes", ...).

    Returns:
        The non-empty cleaned lines.

    Raises:
        NetworkFileError: If the file cannot be read or has no content.
    """
    path = Path(path)
    try:
        with path.open(encoding=encoding) as f:
            lines = [clean_line(line) for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise NetworkFileError(
            f"Cannot read {what} file", file_path=str(path), cause=e
        )

    lines = [line for line in lines if line]
    if not lines:
        raise NetworkFileError(f"{what.capitalize()} file is empty", file_path=str(path))
    return lines


def is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def all_numbers(tokens: Sequence[str]) -> bool:
    return all(is_number(token) for token in tokens)


def is_integer(token: str) -> bool:
    try:
        int(token)
    except ValueError:
        return False
    return True


def columns_parse(
    values: Sequence[str],
    int_columns: Sequence[int] = (),
    float_columns: Sequence[int] = (),
) -> bool:
    """Check that the given columns hold integers and numbers."""
    return all(is_integer(values[i]) for i in int_columns) and all(
        is_number(values[i]) for i in float_columns
    )
