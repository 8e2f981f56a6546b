"""
Map character offsets of a paragraph's visible text back onto its runs.

Word splits text into runs wherever formatting, spell-check state or editing history
changes, so a marker such as ``${name}`` typed in one go can end up spread over
several runs. ``isolate_range`` reshapes the runs so that a character range is covered
by whole runs only, merging the interior runs into the first one.
"""

import logging
from typing import Optional

from docx.text.paragraph import Paragraph
from docx.text.run import Run

from .docx_edit import append_run_content, remove_run, split_run

logger = logging.getLogger(__name__)


def paragraph_text(paragraph: Paragraph) -> str:
    """The coordinate space used for marker offsets."""
    return "".join(run.text for run in paragraph.runs)


def _merge_into_previous(paragraph: Paragraph, index: int) -> None:
    runs = paragraph.runs
    append_run_content(runs[index - 1], runs[index])
    remove_run(paragraph, index)


def isolate_range(paragraph: Paragraph, start: int, end: int) -> bool:
    """Split and merge runs so ``[start, end]`` (inclusive) is exactly one run.

    The run list is re-read after every edit; a stale index after a split would
    point at the wrong run. Returns False when ``end`` lies past the last run.
    """
    start_found = False

    while True:
        pos = 0
        for num_run, run in enumerate(paragraph.runs):
            text = run.text
            next_pos = pos + len(text)

            # Run lies strictly inside the range: fold it into the run before it
            if start < pos and end >= next_pos:
                _merge_into_previous(paragraph, num_run)
                break

            if pos <= start < next_pos and not start_found:
                start_found = True
                if start > pos:
                    split_run(run, start - pos)
                    break

            if pos <= end < next_pos:
                split_run(run, end - pos + 1)
                # The head of the split run closes the range opened in an earlier run
                if start < pos:
                    _merge_into_previous(paragraph, num_run)
                return True

            pos = next_pos
        else:
            logger.warning(f"Range [{start}, {end}] exceeds paragraph text of length {pos}")
            return False


def find_isolated_run(paragraph: Paragraph, start: int, text: str) -> Optional[Run]:
    """The run beginning at offset ``start`` whose whole text equals ``text``.

    Matching on the offset as well as the text keeps two identical markers in one
    paragraph bound to two different runs.
    """
    pos = 0
    for run in paragraph.runs:
        run_text = run.text
        if pos == start and run_text == text:
            return run
        if pos > start:
            break
        pos += len(run_text)
    return None
