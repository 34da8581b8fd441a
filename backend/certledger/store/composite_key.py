"""
Composite key encoding.

WHAT: Builds, splits and range-bounds composite keys for secondary indexes.

WHY: A secondary index entry is a normal key/value entry whose key packs an
index name and ordered attribute values. The encoding has to guarantee:
1. No composite key can equal a plain key
2. A prefix scan for (index, attr1, ..., attrN) has no false positives
   ("me" must not match "mec")
3. The original attribute values can be recovered from the key

HOW: Same layout as the ledger's own encoding:

    U+0000 index U+0000 attr1 U+0000 attr2 U+0000 ...

Every component is terminated by U+0000, so a partial key is always a
component-aligned prefix. Components may not contain U+0000 or U+10FFFF
(the latter bounds range scans). Plain keys may not start with U+0000.
"""

from typing import List, Sequence, Tuple

from certledger.store.errors import CompositeKeyError


COMPOSITE_KEY_NAMESPACE = "\x00"
MIN_UNICODE_RUNE = "\x00"
MAX_UNICODE_RUNE = "\U0010ffff"


def validate_component(component: str) -> None:
    """
    Check that a string can be embedded in a composite key.

    Raises:
        CompositeKeyError: If the component is not a string or contains a
            reserved code point
    """
    if not isinstance(component, str):
        raise CompositeKeyError(f"composite key component must be a string, got {type(component).__name__}")
    if MIN_UNICODE_RUNE in component:
        raise CompositeKeyError(f"input string [{component!r}] contains the reserved code point U+0000")
    if MAX_UNICODE_RUNE in component:
        raise CompositeKeyError(f"input string [{component!r}] contains the reserved code point U+10FFFF")
    try:
        component.encode("utf-8")
    except UnicodeEncodeError as e:
        raise CompositeKeyError(f"input string [{component!r}] is not valid UTF-8: {e}") from e


def make_composite_key(object_type: str, attributes: Sequence[str]) -> str:
    """
    Combine an index name and attribute values into a composite key.

    Args:
        object_type: Index name, e.g. ``"degree~name"``
        attributes: Ordered attribute values

    Returns:
        The composite key

    Raises:
        CompositeKeyError: If any component cannot be encoded
    """
    validate_component(object_type)
    if not object_type:
        raise CompositeKeyError("composite key object type must not be empty")

    key = COMPOSITE_KEY_NAMESPACE + object_type + MIN_UNICODE_RUNE
    for attribute in attributes:
        validate_component(attribute)
        key += attribute + MIN_UNICODE_RUNE
    return key


def split_composite_key(composite_key: str) -> Tuple[str, List[str]]:
    """
    Recover the index name and attribute values from a composite key.

    Raises:
        CompositeKeyError: If the key is not a composite key
    """
    if not is_composite_key(composite_key) or not composite_key.endswith(MIN_UNICODE_RUNE):
        raise CompositeKeyError(f"not a composite key: {composite_key!r}")

    components = composite_key[1:-1].split(MIN_UNICODE_RUNE)
    return components[0], components[1:]


def is_composite_key(key: str) -> bool:
    """True if ``key`` lies in the composite-key namespace."""
    return key.startswith(COMPOSITE_KEY_NAMESPACE)


def partial_key_range(object_type: str, attributes: Sequence[str]) -> Tuple[str, str]:
    """
    Half-open key range ``[start, end)`` covering every composite key that
    begins with the given index name and leading attributes.
    """
    start = make_composite_key(object_type, attributes)
    return start, start + MAX_UNICODE_RUNE
