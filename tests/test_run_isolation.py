"""
Tests for run_isolation.py module.

Tests cover:
- isolate_range: single-run and multi-run markers, formatting of the isolated run
- find_isolated_run: offset-aware lookup
"""

from docx import Document
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn

from wordtemplate.run_isolation import find_isolated_run, isolate_range, paragraph_text


def _paragraph(*texts):
    paragraph = Document().add_paragraph()
    for text in texts:
        paragraph.add_run(text)
    return paragraph


def _texts(paragraph):
    return [run.text for run in paragraph.runs]


class TestIsolateRange:
    """Test isolate_range run reshaping."""

    def test_marker_inside_single_run(self):
        """Test that a marker in the middle of a run gets its own run."""
        paragraph = _paragraph("Hello ${name}!")

        assert isolate_range(paragraph, 6, 12) is True
        assert _texts(paragraph) == ["Hello ", "${name}", "!"]

    def test_marker_spread_over_runs(self):
        """Test that interior runs are merged into the run holding the start."""
        paragraph = _paragraph("Hello ", "${", "name", "}", "!")

        assert isolate_range(paragraph, 6, 12) is True
        assert _texts(paragraph) == ["Hello ", "${name}", "!"]

    def test_marker_keeps_formatting_of_first_run(self):
        """Test that the merged run keeps the formatting of the run holding the start."""
        paragraph = _paragraph("Hello ", "${", "name", "}", "!")
        paragraph.runs[1].bold = True

        isolate_range(paragraph, 6, 12)

        assert paragraph.runs[1].text == "${name}"
        assert paragraph.runs[1].bold is True
        assert paragraph.runs[0].bold is None

    def test_whole_run_marker_is_untouched(self):
        """Test that an already isolated marker is left alone."""
        paragraph = _paragraph("a ", "${x}", " b")

        assert isolate_range(paragraph, 2, 5) is True
        assert _texts(paragraph) == ["a ", "${x}", " b"]

    def test_marker_at_paragraph_edges(self):
        """Test markers at offset 0 and ending at the last character."""
        paragraph = _paragraph("${a}", "mid${", "b}")

        assert isolate_range(paragraph, 0, 3) is True
        assert isolate_range(paragraph, 7, 10) is True
        assert _texts(paragraph) == ["${a}", "mid", "${b}"]

    def test_text_is_preserved(self):
        """Test that isolation never changes the paragraph text."""
        paragraph = _paragraph("Dear ${ti", "tle} ${na", "me},")
        before = paragraph_text(paragraph)

        isolate_range(paragraph, 5, 12)
        isolate_range(paragraph, 14, 20)

        assert paragraph_text(paragraph) == before
        assert "${title}" in _texts(paragraph)
        assert "${name}" in _texts(paragraph)

    def test_range_past_end_returns_false(self):
        """Test that a range beyond the text is reported instead of looping."""
        paragraph = _paragraph("short")

        assert isolate_range(paragraph, 2, 40) is False


class TestFindIsolatedRun:
    """Test find_isolated_run lookup."""

    def test_duplicate_markers_bind_different_runs(self):
        """Test that two identical markers resolve to two distinct runs."""
        paragraph = _paragraph("${a} and ${a}")
        isolate_range(paragraph, 0, 3)
        isolate_range(paragraph, 9, 12)

        first = find_isolated_run(paragraph, 0, "${a}")
        second = find_isolated_run(paragraph, 9, "${a}")

        assert first is not None and second is not None
        assert first._r is not second._r
        assert _texts(paragraph) == ["${a}", " and ", "${a}"]

    def test_missing_run_returns_none(self):
        """Test that a marker not aligned with a run is not found."""
        paragraph = _paragraph("Hello ${name}")

        assert find_isolated_run(paragraph, 6, "${name}") is None


class TestIsolationKeepsRunContent:
    """Test that isolation only moves text-bearing content."""

    def test_symbol_survives_merge(self):
        """Test that a w:sym in the run holding the start is kept after merging."""
        paragraph = _paragraph("${", "x}")
        paragraph.runs[0]._r.append(
            parse_xml(f'<w:sym {nsdecls("w")} w:font="Symbol" w:char="F0B7"/>')
        )

        assert isolate_range(paragraph, 0, 3) is True

        assert _texts(paragraph) == ["${x}"]
        assert paragraph.runs[0]._r.find(qn("w:sym")) is not None
