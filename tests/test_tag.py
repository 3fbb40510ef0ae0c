"""test_tag.py - Unit tests for tag rendering.

Covers:
    - format_tag() without a trace renders only the ctx segment
    - format_tag() with a trace renders ctx then trace, space separated
    - Empty context still renders ctx=""
    - quote() escapes quotes, backslashes and control characters C-style
    - quote() keeps printable non-ASCII text as is
    - new_trace_id() returns short, distinct hex ids
"""

import pytest

from contrail.tag import format_tag, new_trace_id, quote


# ---------------------------------------------------------------------------
# format_tag()
# ---------------------------------------------------------------------------


class TestFormatTag:
    def test_format_tag_context_only(self):
        """Without a trace id only the ctx segment is produced."""
        assert format_tag("module", "") == 'ctx="module"'

    def test_format_tag_trace_defaults_to_empty(self):
        """The trace argument is optional."""
        assert format_tag("module") == 'ctx="module"'

    def test_format_tag_context_and_trace(self):
        """A non-empty trace id adds trace="..." after the ctx segment."""
        assert format_tag("module", "trace-id") == 'ctx="module" trace="trace-id"'

    def test_format_tag_empty_context_is_still_rendered(self):
        """The ctx segment is present even for an empty name."""
        assert format_tag("") == 'ctx=""'
        assert format_tag("", "t1") == 'ctx="" trace="t1"'

    def test_format_tag_escapes_quotes_in_context(self):
        """Quote characters inside the context are backslash-escaped."""
        assert format_tag('say "hi"') == 'ctx="say \\"hi\\""'

    def test_format_tag_escapes_trace_value(self):
        """The trace value is quoted with the same rules as the context."""
        assert format_tag("m", 'a"b') == 'ctx="m" trace="a\\"b"'


# ---------------------------------------------------------------------------
# quote()
# ---------------------------------------------------------------------------


class TestQuote:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("plain", '"plain"'),
            ("back\\slash", '"back\\\\slash"'),
            ("line\nbreak", '"line\\nbreak"'),
            ("tab\there", '"tab\\there"'),
            ("cr\r", '"cr\\r"'),
            ("bell\a", '"bell\\a"'),
            ("\x01", '"\\x01"'),
            ("\x7f", '"\\x7f"'),
            ("\u2028", '"\\u2028"'),
        ],
    )
    def test_quote_escapes_control_and_quote_chars(self, raw, expected):
        """Control and special characters use backslash escapes."""
        assert quote(raw) == expected

    def test_quote_keeps_printable_unicode(self):
        """Printable non-ASCII characters are not escaped."""
        assert quote("café ☕") == '"café ☕"'


# ---------------------------------------------------------------------------
# new_trace_id()
# ---------------------------------------------------------------------------


class TestNewTraceId:
    def test_new_trace_id_is_eight_hex_chars(self):
        """Generated ids are 8-character hexadecimal strings."""
        tid = new_trace_id()
        assert len(tid) == 8
        int(tid, 16)  # raises ValueError if not valid hex

    def test_new_trace_id_is_unique_per_call(self):
        """Two calls produce different ids."""
        assert new_trace_id() != new_trace_id()
