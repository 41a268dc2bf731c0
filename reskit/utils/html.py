"""HTML escaping for generated response fragments."""

from typing import Any


_ESCAPES = {
    "&": "&amp;",
    '"': "&quot;",
    "'": "&#39;",
    "<": "&lt;",
    ">": "&gt;",
}

_TABLE = str.maketrans(_ESCAPES)


def escape_html(value: Any) -> str:
    """Escape ``&"'<>`` so ``value`` can be embedded in HTML text or attributes.

    Non-string values are converted with ``str()`` first.
    """
    return str(value).translate(_TABLE)
