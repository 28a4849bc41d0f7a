"""Tests for fleet_patch.manifest."""

from __future__ import annotations

import pytest

from fleet_patch.errors import RewriteVerificationFailed
from fleet_patch.manifest import find_entry, format_pin, rewrite


class TestFindEntry:
    def test_finds_exact_pin(self, manifest_text: str) -> None:
        entry = find_entry(manifest_text, "requests")
        assert entry is not None
        assert entry.operator == "=="
        assert entry.current_version == "2.20.0"
        assert entry.line_index == 1

    def test_prefix_name_does_not_match_longer_package(self) -> None:
        """Searching for flask never matches flask-restful."""
        assert find_entry("flask-restful==1.0\n", "flask") is None

    def test_skips_longer_name_and_finds_real_line(self) -> None:
        text = "requests-toolbelt==0.9.1\nrequests==2.20.0\n"
        entry = find_entry(text, "requests")
        assert entry is not None
        assert entry.line_index == 1

    def test_single_equals_and_spaces(self) -> None:
        entry = find_entry("  django = 4.0.0\n", "django")
        assert entry is not None
        assert entry.operator == "="
        assert entry.current_version == "4.0.0"

    def test_version_stops_at_marker_and_comment(self) -> None:
        entry = find_entry("pywin32==306; sys_platform == 'win32'  # windows\n", "pywin32")
        assert entry is not None
        assert entry.current_version == "306"

    @pytest.mark.parametrize(
        "line", ["requests>=2.0", "requests ~= 2.0", "requests", "requests!=2.1", "requests=="]
    )
    def test_non_exact_pins_are_not_entries(self, line: str) -> None:
        assert find_entry(line + "\n", "requests") is None

    def test_comment_lines_ignored(self) -> None:
        assert find_entry("# requests==1.0\n", "requests") is None

    def test_absent(self, manifest_text: str) -> None:
        assert find_entry(manifest_text, "numpy") is None

    def test_byte_order_mark_before_first_pin(self) -> None:
        entry = find_entry("\ufeffrequests==2.20.0\ndjango==4.0.0\n", "requests")
        assert entry is not None
        assert entry.current_version == "2.20.0"
        assert entry.line_index == 0


class TestRewrite:
    def test_rewrites_only_target_line(self, manifest_text: str) -> None:
        result = rewrite(manifest_text, "requests", "2.28.0")
        assert result == manifest_text.replace("requests==2.20.0", "requests==2.28.0")
        assert "requests-toolbelt==0.9.1" in result

    def test_preserves_trailing_comment(self, manifest_text: str) -> None:
        result = rewrite(manifest_text, "starlette", "0.49.1")
        assert "starlette==0.49.1  # pinned by fastapi\n" in result

    def test_preserves_crlf_endings(self) -> None:
        text = "django==4.0.0\r\nrequests==2.20.0\r\n"
        assert rewrite(text, "requests", "2.28.0") == "django==4.0.0\r\nrequests==2.28.0\r\n"

    def test_preserves_missing_final_newline(self) -> None:
        assert rewrite("requests==2.20.0", "requests", "2.28.0") == "requests==2.28.0"

    def test_normalizes_operator(self) -> None:
        assert rewrite("  django = 4.0.0\n", "django", "4.2.1") == "  django==4.2.1\n"

    def test_replaces_compound_specifier(self) -> None:
        assert rewrite("django==4.0.0,<5\n", "django", "4.2.1") == "django==4.2.1\n"

    def test_keeps_byte_order_mark(self) -> None:
        result = rewrite("\ufeffrequests==2.20.0\ndjango==4.0.0\n", "requests", "2.28.0")
        assert result == "\ufeffrequests==2.28.0\ndjango==4.0.0\n"

    def test_idempotent(self, manifest_text: str) -> None:
        once = rewrite(manifest_text, "requests", "2.28.0")
        assert rewrite(once, "requests", "2.28.0") == once

    def test_same_version_only_normalizes_operator(self) -> None:
        assert rewrite("django = 4.0.0\n", "django", "4.0.0") == "django==4.0.0\n"

    def test_missing_package_fails_verification(self, manifest_text: str) -> None:
        with pytest.raises(RewriteVerificationFailed):
            rewrite(manifest_text, "numpy", "2.0.0")

    def test_unparseable_version_fails_verification(self, manifest_text: str) -> None:
        with pytest.raises(RewriteVerificationFailed) as excinfo:
            rewrite(manifest_text, "requests", "2.28.0 beta")
        assert excinfo.value.found == "requests==2.28.0"


def test_format_pin() -> None:
    assert format_pin("requests", "2.28.0") == "requests==2.28.0"
