"""Unit name validation.

A unit's name becomes a single directory or file name under its store,
so it must not carry path structure.
"""

import re

# Characters no filesystem we target accepts in a name
_FORBIDDEN = re.compile(r'[/\\:*?"<>|\x00-\x1f]')


def validate_unit_name(name: str) -> str:
    """Return *name* stripped, or raise if it cannot be a store entry.

    Rules:
    - Not empty after trimming
    - Not '.' or '..'
    - No path separators, control characters, or reserved characters

    Raises:
        ValueError: With the reason the name was rejected.
    """
    cleaned = name.strip()

    if not cleaned:
        msg = "name is empty"
        raise ValueError(msg)

    if cleaned in (".", ".."):
        msg = f"name '{cleaned}' is not allowed"
        raise ValueError(msg)

    if _FORBIDDEN.search(cleaned):
        msg = f"name '{cleaned}' contains a path separator or reserved character"
        raise ValueError(msg)

    return cleaned
