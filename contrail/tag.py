"""tag.py - Rendering of the ctx/trace metadata segment.

Every line written through a contrail Logger carries a tag of the form::

    ctx="payments"
    ctx="payments" trace="a1b2c3d4"

The segment is scraped by downstream log tooling, so its shape is fixed: the
context segment is always present, the trace segment follows it only when a
trace id was given, and both values are quoted with C-style escaping
so that any string (including an empty one) renders unambiguously.
"""

import uuid

# Short escapes for characters that must not appear raw inside the quotes.
_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def quote(value: str) -> str:
    """Return ``value`` wrapped in double quotes with C-style escaping.

    Quote and backslash characters are backslash-escaped, common control
    characters use their short escape, and any other non-printable character
    becomes a ``\\x``, ``\\u`` or ``\\U`` escape. Printable non-ASCII text is
    kept as is.

    Example:
        >>> quote('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    parts = ['"']
    for ch in value:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
        elif ch.isprintable():
            parts.append(ch)
        else:
            code = ord(ch)
            if code < 0x80:
                parts.append(f"\\x{code:02x}")
            elif code <= 0xFFFF:
                parts.append(f"\\u{code:04x}")
            else:
                parts.append(f"\\U{code:08x}")
    parts.append('"')
    return "".join(parts)


def format_tag(ctx: str, trace: str = "") -> str:
    """Render the tag text for a context name and optional trace id.

    Args:
        ctx: Context name identifying the emitting subsystem. May be empty.
        trace: Trace id. The trace segment is omitted when this is empty.

    Returns:
        ``ctx="<ctx>"`` or ``ctx="<ctx>" trace="<trace>"``.

    Example:
        >>> format_tag("module")
        'ctx="module"'
        >>> format_tag("module", "trace-id")
        'ctx="module" trace="trace-id"'
    """
    if trace == "":
        return f"ctx={quote(ctx)}"
    return f"ctx={quote(ctx)} trace={quote(trace)}"


def new_trace_id() -> str:
    """Return a fresh 8-character hex trace id.

    Useful when a request arrives without an upstream correlation id. The id
    is the first 8 hex characters of a UUID4.
    """
    return uuid.uuid4().hex[:8]
