"""Pytest path setup for src-layout imports, plus template fixtures."""

from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PYTHON = REPO_ROOT / "src" / "python"

if str(SRC_PYTHON) not in sys.path:
    sys.path.insert(0, str(SRC_PYTHON))


@pytest.fixture
def make_template(tmp_path):
    """Write a DOCX with one paragraph per text and return its path as a string."""
    from docx import Document

    def _make(*paragraphs, name="in.docx"):
        doc = Document()
        for text in paragraphs:
            doc.add_paragraph(text)
        path = tmp_path / name
        doc.save(str(path))
        return str(path)

    return _make
