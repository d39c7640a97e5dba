from __future__ import annotations

import re
from pathlib import Path
from typing import List

# A target header starts in column one: a token without whitespace or colon,
# then a colon followed by a space or the end of the line. `name:=` and
# `path:sub` are not headers.
TARGET_HEADER_RE = re.compile(r"^([^\s:]+):(?: |$)", re.MULTILINE)

PRIVATE_PREFIX = "."


def is_private_target(name: str) -> bool:
    return name.startswith(PRIVATE_PREFIX)


def parse_targets(text: str) -> List[str]:
    """Return the public target names declared in `text`, top to bottom.

    Duplicates are kept in the order they are encountered.
    """
    targets: List[str] = []
    for m in TARGET_HEADER_RE.finditer(text):
        name = m.group(1)
        if is_private_target(name):
            continue
        targets.append(name)
    return targets


def extract_targets(file_path: str | Path) -> List[str]:
    """Read a justfile and return its public target names in file order.

    Raises OSError (e.g. FileNotFoundError) when the file cannot be read.
    """
    text = Path(file_path).read_text(encoding="utf-8")
    return parse_targets(text)
