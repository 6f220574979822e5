"""Unit tests for reasoning markup removal."""

from akashchat.sanitize import sanitize


class TestSanitize:
    """Test cases for the sanitize function."""

    def test_no_markup(self):
        """Test text without markup is only trimmed."""
        assert sanitize("  Hello world \n") == "Hello world"

    def test_inline_span_removed(self):
        """Test a span in the middle leaves surrounding text intact."""
        assert sanitize("A <think>B</think> C") == "A  C"

    def test_multiline_span_removed(self):
        """Test spans may cross line breaks."""
        text = "<think>\nstep one\nstep two\n</think>\n\nFinal answer"
        assert sanitize(text) == "Final answer"

    def test_multiple_spans_removed(self):
        """Test every span is removed, not just the first."""
        assert sanitize("<think>a</think>X<think>b</think>Y") == "XY"

    def test_only_markup_returns_input(self):
        """Test stripping to nothing returns the untouched input."""
        assert sanitize("<think>only</think>") == "<think>only</think>"

    def test_empty_input(self):
        """Test empty text stays empty."""
        assert sanitize("") == ""

    def test_case_sensitive_markers(self):
        """Test differently cased markers are left alone."""
        assert sanitize("<THINK>x</THINK> y") == "<THINK>x</THINK> y"

    def test_unclosed_marker_kept(self):
        """Test an opening marker without a close is not stripped."""
        assert sanitize("<think>never closed") == "<think>never closed"
