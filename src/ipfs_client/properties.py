"""
Lookup of named properties in parsed replies.
"""

import json
from typing import Any, Optional, Type

from .exceptions import MissingFieldError


def get_property(
    doc: Any,
    name: str,
    line_number: int = 0,
    expected_type: Optional[Type] = None,
) -> Any:
    """
    Return ``doc[name]`` or fail with a descriptive error.

    Args:
        doc: A parsed JSON value
        name: Top-level property to look up
        line_number: Reply line the document came from (0 when not line based)
        expected_type: If given, the value must be an instance of it

    Raises:
        MissingFieldError: If ``doc`` is not an object or lacks ``name``
        TypeError: If the value is not of ``expected_type``
    """
    if not isinstance(doc, dict) or name not in doc:
        raise MissingFieldError(name, line_number, json.dumps(doc))

    value = doc[name]

    if expected_type is not None and not isinstance(value, expected_type):
        raise TypeError(
            f'Property "{name}" is {type(value).__name__}, '
            f"expected {expected_type.__name__}"
        )

    return value
