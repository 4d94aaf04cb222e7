"""Tests for the tokenizer and strict integer parsing."""

import pytest

from vminspect.collectors.tokens import (
    FIELD_DELIMS,
    KEY_VALUE_DELIMS,
    field_value,
    parse_int,
    split_lines,
    tokenize,
)
from vminspect.errors import ParseError


class TestTokenize:
    def test_collapses_delimiter_runs(self):
        assert tokenize("VmRSS:\t  262144 kB", KEY_VALUE_DELIMS) == ["VmRSS", "262144", "kB"]

    def test_drops_leading_and_trailing_delimiters(self):
        assert tokenize("  :a: b\t", KEY_VALUE_DELIMS) == ["a", "b"]

    def test_header_delimiters_keep_colons(self):
        tokens = tokenize("7f00-7f10 r-xp 00000000 08:02 1234   /lib/x.so", FIELD_DELIMS)
        assert tokens == ["7f00-7f10", "r-xp", "00000000", "08:02", "1234", "/lib/x.so"]

    def test_empty_line(self):
        assert tokenize("", KEY_VALUE_DELIMS) == []
        assert tokenize(" \t: ", KEY_VALUE_DELIMS) == []


class TestParseInt:
    def test_decimal(self):
        assert parse_int("262144") == 262144

    def test_hex(self):
        assert parse_int("7ffd3a1c0000", radix=16) == 0x7FFD3A1C0000
        assert parse_int("DEADbeef", radix=16) == 0xDEADBEEF

    @pytest.mark.parametrize("token", ["", "12a", "-1", "+1", " 1", "1_000", "0x10", "1.5"])
    def test_rejects_non_digits(self, token):
        with pytest.raises(ParseError):
            parse_int(token)

    def test_hex_digits_rejected_in_decimal(self):
        with pytest.raises(ParseError):
            parse_int("ff")

    def test_width_limits(self):
        assert parse_int("4294967295", bits=32) == 2**32 - 1
        with pytest.raises(ParseError):
            parse_int("4294967296", bits=32)
        assert parse_int("ffffffffffffffff", radix=16) == 2**64 - 1
        with pytest.raises(ParseError):
            parse_int("10000000000000000", radix=16)

    def test_error_message(self):
        with pytest.raises(ParseError) as exc:
            parse_int("abc")
        assert str(exc.value).startswith("Failed to parse process information, error=")
        assert "'abc'" in str(exc.value)


def test_field_value_requires_value():
    assert field_value(["Rss", "4", "kB"], "Rss: 4 kB") == "4"
    with pytest.raises(ParseError, match="missing value"):
        field_value(["Rss"], "Rss:")


def test_tokenize_escapes_regex_characters():
    assert tokenize("a-b]]c^d", "-]^") == ["a", "b", "c", "d"]


class TestSplitLines:
    def test_only_newline_splits(self):
        assert split_lines("a\x0cb\x1cc\rd e\nf") == ["a\x0cb\x1cc\rd e", "f"]

    def test_final_newline(self):
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\n\n") == ["a", ""]
        assert split_lines("") == []
