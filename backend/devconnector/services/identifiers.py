"""Identifier utilities for sub-collection elements.

Identifiers are random UUIDs: unique within any sub-collection and opaque
apart from equality.
"""

import uuid


def new_identifier() -> uuid.UUID:
    """Generate a fresh sub-record identifier."""
    return uuid.uuid4()


def identifiers_equal(a: uuid.UUID | str, b: uuid.UUID | str) -> bool:
    """Compare two identifiers, accepting either UUIDs or their string form.

    Malformed strings never equal anything.
    """
    try:
        return _coerce(a) == _coerce(b)
    except ValueError:
        return False


def parse_identifier(value: uuid.UUID | str) -> uuid.UUID:
    """Parse an identifier supplied by a caller.

    Raises:
        ValueError: If value is not a valid UUID string.
    """
    return _coerce(value)


def _coerce(value: uuid.UUID | str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))
