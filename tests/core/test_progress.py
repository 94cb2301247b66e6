"""Tests for core/progress.py module.

Covers:
- status() function
- print_block() function
- get_console()/set_console()
"""

from __future__ import annotations

from unittest.mock import patch

from rich.console import Console

from canopy.core.progress import _STYLES, get_console, print_block, set_console, status


class TestStyles:
    """Tests for _STYLES constant."""

    def test_has_expected_styles(self) -> None:
        """Contains expected style keys."""
        expected = {"success", "error", "info", "warning", "none"}
        assert set(_STYLES.keys()) == expected

    def test_success_style(self) -> None:
        """Success style has checkmark."""
        assert "✓" in _STYLES["success"]

    def test_error_style(self) -> None:
        """Error style has X mark."""
        assert "✗" in _STYLES["error"]


class TestStatus:
    """Tests for status function."""

    def test_prints_message(self) -> None:
        """Prints a message to console."""
        with patch("canopy.core.progress._console") as mock_console:
            status("Test message")
            mock_console.print.assert_called_once()

    def test_warning_style(self) -> None:
        """Applies warning style."""
        with patch("canopy.core.progress._console") as mock_console:
            status("1 test failed", style="warning")
            call_args = mock_console.print.call_args[0][0]
            assert "!" in call_args
            assert "1 test failed" in call_args

    def test_with_indent(self) -> None:
        """Applies indentation."""
        with patch("canopy.core.progress._console") as mock_console:
            status("Indented", indent=4)
            call_args = mock_console.print.call_args[0][0]
            assert "    Indented" in call_args

    def test_unknown_style_has_no_prefix(self) -> None:
        """Unknown styles fall back to no prefix."""
        with patch("canopy.core.progress._console") as mock_console:
            status("plain", style="sparkly")
            assert mock_console.print.call_args[0][0] == "plain"


class TestPrintBlock:
    """Tests for print_block function."""

    def test_text_printed_verbatim(self) -> None:
        """Square brackets in reasons are not treated as markup."""
        console = Console(record=True, width=120, color_system=None)
        previous = set_console(console)
        try:
            print_block("✗ parses (1 ms)\n  expected [1, 2]")
        finally:
            set_console(previous)

        assert console.export_text() == "✗ parses (1 ms)\n  expected [1, 2]\n"


class TestConsole:
    """Tests for the shared console accessors."""

    def test_set_console_returns_previous(self) -> None:
        """Swapping returns the console that was active."""
        original = get_console()
        replacement = Console(record=True)

        previous = set_console(replacement)
        try:
            assert previous is original
            assert get_console() is replacement
        finally:
            set_console(original)

    def test_default_console_writes_to_stderr(self) -> None:
        """Reports go to stderr."""
        assert get_console().stderr
