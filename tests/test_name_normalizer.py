"""Tests for name normalization and comparison keys."""

import pytest

from retitle.matching import comparison_key, normalize_name


class TestNormalizeName:
    """Test normalize_name display form."""

    def test_strips_pdf_extension(self) -> None:
        assert normalize_name("report.pdf") == "report"

    def test_extension_is_case_insensitive(self) -> None:
        assert normalize_name("Annual_Report_2023.PDF") == "Annual_Report_2023"

    def test_strips_surrounding_whitespace(self) -> None:
        assert normalize_name("  notes.pdf  ") == "notes"

    def test_repeated_extensions_removed(self) -> None:
        assert normalize_name("report.pdf.pdf") == "report"

    def test_keeps_casing_and_punctuation(self) -> None:
        assert normalize_name("Q1-2023 Report (final)") == "Q1-2023 Report (final)"

    def test_other_extension_kept(self) -> None:
        assert normalize_name("report.2023") == "report.2023"

    def test_empty_string(self) -> None:
        assert normalize_name("") == ""

    @pytest.mark.parametrize(
        "raw",
        ["a.pdf", " b .pdf ", "c.PDF.pdf", "plain", "", "x.pdf.txt", ".pdf"],
    )
    def test_idempotent(self, raw: str) -> None:
        once = normalize_name(raw)
        assert normalize_name(once) == once


class TestComparisonKey:
    """Test the form scored by the matcher."""

    def test_underscores_become_spaces(self) -> None:
        assert comparison_key("Annual_Report_2023") == "annual report 2023"

    def test_letter_digit_runs_split(self) -> None:
        assert comparison_key("AR2023_en_book") == "ar 2023 en book"

    def test_digit_letter_runs_split(self) -> None:
        assert comparison_key("2023report") == "2023 report"

    def test_punctuation_and_whitespace_collapsed(self) -> None:
        assert comparison_key("Q1-2023   Report!!") == "q 1 2023 report"

    def test_extension_removed(self) -> None:
        assert comparison_key("file.pdf") == "file"

    def test_no_alphanumeric_content(self) -> None:
        assert comparison_key("___ --- ...") == ""

    def test_case_insensitive(self) -> None:
        assert comparison_key("ANNUAL report") == comparison_key("annual REPORT")
