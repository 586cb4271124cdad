"""Tests for filename and path sanitization."""

from __future__ import annotations

import pytest

from pathkeep.security.sanitizer import (
    FALLBACK_NAME,
    SanitizeOptions,
    is_reserved_device_name,
    sanitize_filename,
    sanitize_path,
    split_extension,
)

UNSAFE = '<>:"|?*\\/\x00'

ZWSP = chr(0x200B)
RLO = chr(0x202E)
BOM = chr(0xFEFF)


class TestSanitizeFilename:
    """Single-segment sanitization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("CON.txt", "CON_.txt"),
            ("con", "con_"),
            ("lpt9.log", "lpt9_.log"),
            ("COM10.txt", "COM10.txt"),
            ("...x...", "x"),
            ("", FALLBACK_NAME),
            ("   ", FALLBACK_NAME),
            ("....", FALLBACK_NAME),
            ("report.pdf", "report.pdf"),
            ("a<b>c.txt", "a_b_c.txt"),
            ("dir/file.txt", "dir_file.txt"),
            ("back\\slash", "back_slash"),
        ],
    )
    def test_known_outputs(self, raw, expected):
        assert sanitize_filename(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "normal.txt",
            "../../etc/passwd",
            'quote"d|pipe?star*',
            "nul\x00byte",
            "tab\tand\nnewline",
            "C:\\Windows\\system32",
            "x" * 400 + ".txt",
            "   .hidden   ",
        ],
    )
    def test_output_is_always_safe(self, raw):
        result = sanitize_filename(raw)
        assert result
        assert len(result) <= 255
        assert not any(ch in result for ch in UNSAFE)

    def test_nul_removed_even_without_control_stripping(self):
        result = sanitize_filename("a\x00b", SanitizeOptions(remove_control_chars=False))
        assert "\x00" not in result

    def test_control_characters_removed(self):
        assert sanitize_filename("a\x01b\x1fc\x7f") == "abc"

    def test_zero_width_and_bidi_removed(self):
        raw = f"in{ZWSP}voice{RLO}.pdf{BOM}"
        assert sanitize_filename(raw) == "invoice.pdf"

    def test_zero_width_kept_when_disabled(self):
        raw = f"a{ZWSP}b"
        assert sanitize_filename(raw, SanitizeOptions(remove_zero_width=False)) == raw

    def test_nfc_normalization(self):
        decomposed = "cafe\u0301.txt"
        assert sanitize_filename(decomposed) == "caf\u00e9.txt"

    def test_spaces_replaced_when_disallowed(self):
        assert sanitize_filename("my file.txt", SanitizeOptions(allow_spaces=False)) == "my_file.txt"

    def test_dots_replaced_in_name_only(self):
        opts = SanitizeOptions(allow_dots=False)
        assert sanitize_filename("archive.tar.gz", opts) == "archive_tar.gz"

    def test_custom_replacement(self):
        assert sanitize_filename("a:b", SanitizeOptions(replacement="-")) == "a-b"

    def test_unsafe_replacement_is_neutralized(self):
        result = sanitize_filename("a:b", SanitizeOptions(replacement="/"))
        assert "/" not in result
        assert result == "ab"

    def test_truncation_preserves_extension(self):
        result = sanitize_filename("a" * 300 + ".json")
        assert len(result) == 255
        assert result.endswith(".json")

    def test_truncation_without_preserving_extension(self):
        opts = SanitizeOptions(max_length=10, preserve_extension=False)
        assert sanitize_filename("abcdefghijkl.json", opts) == "abcdefghij"

    def test_extension_longer_than_limit_truncates_blindly(self):
        opts = SanitizeOptions(max_length=5)
        assert sanitize_filename("a.verylongextension", opts) == "a.ver"

    @pytest.mark.parametrize(
        "raw,max_length,expected",
        [
            ("CONX", 3, "CO_"),
            ("CONX.txt", 7, "CO_.txt"),
            ("ab. c", 3, "ab"),
            ("ab  cd", 3, "ab"),
        ],
    )
    def test_truncation_result_is_re_cleaned(self, raw, max_length, expected):
        result = sanitize_filename(raw, SanitizeOptions(max_length=max_length))
        assert result == expected
        assert len(result) <= max_length
        assert not is_reserved_device_name(result)
        assert not result.endswith((".", " "))

    def test_non_string_input(self):
        assert sanitize_filename(12345) == "12345"

    def test_leading_dot_trimmed(self):
        assert sanitize_filename(".gitignore") == "gitignore"


class TestSplitExtension:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("file.txt", ("file", ".txt")),
            ("archive.tar.gz", ("archive.tar", ".gz")),
            (".gitignore", (".gitignore", "")),
            ("noext", ("noext", "")),
        ],
    )
    def test_split(self, name, expected):
        assert split_extension(name) == expected

    def test_reserved_detection_ignores_case_and_extension(self):
        assert is_reserved_device_name("aux.json")
        assert is_reserved_device_name("Nul")
        assert not is_reserved_device_name("auxiliary.json")


class TestSanitizePath:
    """Multi-segment sanitization."""

    def test_traversal_segments_dropped(self):
        assert sanitize_path("uploads/../../etc/passwd") == "uploads/etc/passwd"

    def test_mixed_separators(self):
        assert sanitize_path("a\\b/c") == "a/b/c"

    def test_empty_segments_collapse(self):
        assert sanitize_path("//a///b/") == "a/b"

    def test_each_segment_sanitized(self):
        assert sanitize_path("docs/CON/report?.txt") == "docs/CON_/report_.txt"

    def test_only_traversal_yields_empty(self):
        assert sanitize_path("../..") == ""
