from __future__ import annotations

import logging
from typing import Iterable, List

from docx.oxml.ns import qn
from lxml import etree

from .errors import WordTemplateError

logger = logging.getLogger(__name__)

REVISION_DROP_TAGS = (
    qn("w:del"),
    qn("w:moveFrom"),
)
REVISION_STRIP_TAGS = (
    qn("w:ins"),
    qn("w:moveTo"),
)
REVISION_MARKER_TAGS = (
    qn("w:moveFromRangeStart"),
    qn("w:moveFromRangeEnd"),
    qn("w:moveToRangeStart"),
    qn("w:moveToRangeEnd"),
    # Formatting revisions
    qn("w:rPrChange"),
    qn("w:pPrChange"),
    qn("w:sectPrChange"),
    qn("w:tblPrChange"),
    qn("w:tblGridChange"),
    qn("w:tcPrChange"),
    qn("w:trPrChange"),
)
REVISION_TAGS = frozenset(REVISION_DROP_TAGS + REVISION_STRIP_TAGS + REVISION_MARKER_TAGS)


class DocxRevisionError(WordTemplateError):
    pass


def _iter_part_roots(document) -> Iterable:
    root = getattr(document, "element", None)
    if root is None or root.tag != qn("w:document"):
        raise DocxRevisionError(f"Not a Word document: {type(document).__name__}")
    yield root
    for rel in document.part.rels.values():
        if rel.is_external:
            continue
        if "header" in rel.reltype or "footer" in rel.reltype:
            root = getattr(rel.target_part, "element", None)
            if root is not None:
                yield root


def accept_revisions_in_element(root) -> int:
    """Accept every tracked change below ``root`` and return how many were found.

    Deleted content is dropped, inserted content is unwrapped so its runs become
    direct children of their paragraph, and move ranges and property-change records
    are discarded.
    """
    found = sum(1 for node in root.iter() if node.tag in REVISION_TAGS)
    if not found:
        return 0

    etree.strip_elements(root, *REVISION_DROP_TAGS, *REVISION_MARKER_TAGS, with_tail=False)
    # w:ins can nest inside w:moveTo and vice versa; strip_tags handles both levels
    etree.strip_tags(root, *REVISION_STRIP_TAGS)
    return found


def accept_revisions(document) -> int:
    """Accept tracked changes in the body, headers and footers of ``document``."""
    total = 0
    roots: List = list(_iter_part_roots(document))
    for root in roots:
        total += accept_revisions_in_element(root)
    if total:
        logger.info(f"Accepted {total} tracked revision element(s)")
    return total
