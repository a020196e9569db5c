"""
Flat key codec for the ordered store.

Hierarchical keys are lists of string segments. They are flattened into a
single sortable string by joining on the ASCII unit separator, which sorts
below every printable character so that a parent key groups directly ahead
of its children.
"""

from typing import Iterable, List

SEPARATOR = chr(0x1F)


def encode_key(segments: Iterable[str]) -> List[str]:
    """Sanitize segments by stripping literal separator characters.

    Stripping is lossy: two identifiers that differ only by the separator
    character map to the same key.
    """
    return [str(segment).replace(SEPARATOR, "") for segment in segments]


def join_key(segments: Iterable[str]) -> str:
    """Join sanitized segments into a flat key."""
    return SEPARATOR.join(segments)


def split_key(flat_key: str) -> List[str]:
    """Split a flat key back into its segments."""
    return flat_key.split(SEPARATOR)
