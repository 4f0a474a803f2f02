"""Tests for route tokenization."""

from airroute.route.lexer import Token, tokenize


class TestTokenize:
    """Test tokenize function."""

    def test_splits_on_whitespace_runs(self):
        """Test multiple spaces, tabs and newlines separate tokens."""
        tokens = tokenize("KALB   PAYGE\tQ822\nFNT")

        assert [t.text for t in tokens] == ["KALB", "PAYGE", "Q822", "FNT"]

    def test_uppercases_and_keeps_raw(self):
        """Test tokens are upper-cased but keep the typed text."""
        tokens = tokenize("kalb Payge")

        assert tokens[0] == Token(text="KALB", index=0, raw="kalb")
        assert tokens[1].text == "PAYGE"
        assert tokens[1].raw == "Payge"

    def test_records_positions(self):
        """Test each token knows its index."""
        tokens = tokenize("  A B  C ")

        assert [t.index for t in tokens] == [0, 1, 2]

    def test_empty_input(self):
        """Test empty and blank strings give no tokens."""
        assert tokenize("") == []
        assert tokenize("   \t ") == []

    def test_non_string_input(self):
        """Test non-string input gives no tokens instead of failing."""
        assert tokenize(None) == []
        assert tokenize(42) == []
        assert tokenize(["KALB"]) == []

    def test_str_is_text(self):
        """Test a token prints as its normalized text."""
        assert str(tokenize("dct")[0]) == "DCT"
