"""Value wrapper encoding.

Values are stored as the JSON text ``{"value":<original>}`` so that a stored
``null`` stays distinct from a missing row. The compact separators match the
output of JavaScript's ``JSON.stringify`` used by older writers of the same
file.
"""

import json
from typing import Any

from simple_storage.utils.errors import DataIntegrityError, InvalidValueError

WRAPPER_FIELD = "value"


def encode_value(value: Any) -> str:
    """Serialise a value into its stored wrapper text."""
    try:
        return json.dumps(
            {WRAPPER_FIELD: value},
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise InvalidValueError(
            f"Value is not JSON-serialisable: {e}",
            details={"type": type(value).__name__},
        ) from e


def decode_value(raw: str) -> Any:
    """Deserialise stored wrapper text back into the original value."""
    try:
        wrapper = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DataIntegrityError(
            "Stored value is not valid JSON", details={"error": str(e)}
        ) from e

    if not isinstance(wrapper, dict) or WRAPPER_FIELD not in wrapper:
        raise DataIntegrityError(
            "Stored value is not a value wrapper",
            details={"raw": raw if isinstance(raw, str) else repr(raw)},
        )

    return wrapper[WRAPPER_FIELD]
