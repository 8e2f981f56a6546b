"""
Formatting-preserving structural edits on python-docx nodes.

Every clone copies the formatting element of its source (w:rPr, w:pPr, w:tblPr and
w:tblGrid, w:trPr, w:tcPr) with ``copy.deepcopy`` so the clone never shares XML with
the source. Positions are always re-read from the live tree: callers must not keep
indices across calls that add or remove siblings.
"""

import copy
import logging
from typing import List, Optional, Tuple, Union

from docx.document import Document as DocumentObject
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.oxml.table import CT_Tbl, CT_Tc
from docx.shared import Inches
from docx.table import Table, _Cell, _Row
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from .errors import WordTemplateError

logger = logging.getLogger(__name__)

BodyElement = Union[Paragraph, Table]
# An int index, or a sibling node of the target container (the new node goes before it)
Position = Union[int, Paragraph, Table, Run, _Row, _Cell]

_BLOCK_TAGS = (qn("w:p"), qn("w:tbl"))


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def _container(body):
    # A Document delegates its block content to its _Body proxy; _Body itself also
    # carries a _body attribute, holding the raw w:body element
    return body._body if isinstance(body, DocumentObject) else body


def _block_children(element) -> List:
    return [child for child in element if child.tag in _BLOCK_TAGS]


def body_elements(body) -> List[BodyElement]:
    """Paragraphs and tables directly inside a body, header, footer or cell."""
    container = _container(body)
    items: List[BodyElement] = []
    for child in _block_children(container._element):
        if child.tag == qn("w:p"):
            items.append(Paragraph(child, container))
        else:
            items.append(Table(child, container))
    return items


def table_rows(table: Table) -> List[_Row]:
    return [_Row(tr, table) for tr in table._tbl.tr_lst]


def row_cells(row: _Row) -> List[_Cell]:
    # Physical w:tc children; _Row.cells repeats spanned and merged cells
    return [_Cell(tc, row.table) for tc in row._tr.tc_lst]


def get_content(body) -> str:
    """Concatenated run text of a body, descending into table cells."""
    parts: List[str] = []
    for element in body_elements(body):
        if isinstance(element, Paragraph):
            parts.extend(run.text for run in element.runs)
        else:
            for row in table_rows(element):
                for cell in row_cells(row):
                    parts.append(get_content(cell))
    return "".join(parts)


def _resolve_position(siblings: List, pos_dest: Position) -> Optional[int]:
    """Turn an index or a sibling handle into an index valid for insertion."""
    if isinstance(pos_dest, int):
        if 0 <= pos_dest <= len(siblings):
            return pos_dest
        return None
    element = getattr(pos_dest, "_element", pos_dest)
    for index, sibling in enumerate(siblings):
        if sibling is element:
            return index
    return None


def _insert_at(parent, siblings: List, index: int, new_element, *successors: str):
    if index < len(siblings):
        siblings[index].addprevious(new_element)
    elif siblings:
        siblings[-1].addnext(new_element)
    else:
        parent.insert_element_before(new_element, *successors)
    return new_element


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------

def _new_table():
    # Same shape Word gives a fresh table: one row, one cell, one empty paragraph
    return CT_Tbl.new_tbl(1, 1, Inches(1))


def _new_row():
    tr = OxmlElement("w:tr")
    tr.append(CT_Tc.new())
    return tr


def _replace_properties(clone_el, source_el, tag: str, after: Optional[str] = None,
                        required: bool = False):
    """Replace the ``tag`` child of ``clone_el`` by a deep copy of the source's."""
    current = clone_el.find(qn(tag))
    if current is not None:
        clone_el.remove(current)

    source = source_el.find(qn(tag))
    if source is not None:
        replacement = copy.deepcopy(source)
    elif required:
        replacement = OxmlElement(tag)
    else:
        return None

    anchor = clone_el.find(qn(after)) if after else None
    if anchor is not None:
        anchor.addnext(replacement)
    else:
        clone_el.insert(0, replacement)
    return replacement


# ---------------------------------------------------------------------------
# Run text
# ---------------------------------------------------------------------------
# Only the text-bearing children of a w:r are rewritten. Symbols, drawings, field
# characters and note references stay in the run.

_TEXT_CHILDREN = "w:br | w:cr | w:noBreakHyphen | w:ptab | w:t | w:tab"


def _text_of(child) -> str:
    tag = child.tag
    if tag == qn("w:t"):
        return child.text or ""
    if tag in (qn("w:tab"), qn("w:ptab")):
        return "\t"
    if tag == qn("w:cr"):
        return "\n"
    if tag == qn("w:noBreakHyphen"):
        return "-"
    # w:br: only a line break maps to text, page and column breaks do not
    return "\n" if child.get(qn("w:type"), "textWrapping") == "textWrapping" else ""


def set_run_text(run: Run, text: str) -> None:
    """Replace the text of ``run`` where its first text child was, keeping other content."""
    r = run._r
    old = r.xpath(_TEXT_CHILDREN)
    holder = OxmlElement("w:r")
    holder.text = text  # tabs and newlines become w:tab / w:br
    new = list(holder)

    if old:
        for element in new:
            old[0].addprevious(element)
        for element in old:
            r.remove(element)
    else:
        for element in new:
            r.append(element)


def slice_run_text(run: Run, start: int, end: Optional[int] = None) -> None:
    """Keep characters ``[start, end)`` of the run text, leaving non-text content alone."""
    r = run._r
    pos = 0
    for child in r.xpath(_TEXT_CHILDREN):
        piece = _text_of(child)
        lo, hi = pos, pos + len(piece)
        pos = hi
        if not piece:
            continue

        keep_lo = max(lo, start)
        keep_hi = hi if end is None else min(hi, end)
        if keep_lo >= keep_hi:
            r.remove(child)
        elif keep_lo > lo or keep_hi < hi:
            # Only w:t is longer than one character, so only w:t is ever cut
            child.text = piece[keep_lo - lo:keep_hi - lo]
            child.set(qn("xml:space"), "preserve")


def append_run_content(target: Run, source: Run) -> None:
    """Move every child of ``source`` except its w:rPr to the end of ``target``."""
    for child in list(source._r):
        if child.tag != qn("w:rPr"):
            target._r.append(child)


# ---------------------------------------------------------------------------
# Clone
# ---------------------------------------------------------------------------

def clone_run(clone: Run, source: Run, is_empty: bool = False) -> None:
    """Copy run formatting, and the text unless ``is_empty``."""
    _replace_properties(clone._r, source._r, "w:rPr")

    if is_empty:
        return

    clone.text = source.text


def clone_paragraph(clone: Paragraph, source: Paragraph, is_empty: bool = False) -> None:
    """Copy paragraph formatting, and a clone of every run unless ``is_empty``."""
    _replace_properties(clone._p, source._p, "w:pPr")

    if is_empty:
        return

    for run in source.runs:
        new_run = Run(clone._p.add_r(), clone)
        clone_run(new_run, run)


def clone_table(clone: Table, source: Table, is_empty: bool = False) -> None:
    """Copy table formatting and grid, then every row unless ``is_empty``.

    The first row already present in ``clone`` is reused for the first source row.
    """
    _replace_properties(clone._tbl, source._tbl, "w:tblPr", required=True)
    _replace_properties(clone._tbl, source._tbl, "w:tblGrid", after="w:tblPr", required=True)

    if is_empty:
        return

    existing = clone._tbl.tr_lst
    for index, row in enumerate(table_rows(source)):
        if index == 0 and existing:
            tr = existing[0]
        else:
            tr = clone._tbl.add_tr()
        clone_table_row(_Row(tr, clone), row)


def clone_table_row(clone: _Row, source: _Row, is_empty: bool = False) -> None:
    """Copy row formatting, then every cell unless ``is_empty``.

    The first cell already present in ``clone`` is reused for the first source cell.
    """
    _replace_properties(clone._tr, source._tr, "w:tblPrEx")
    _replace_properties(clone._tr, source._tr, "w:trPr", after="w:tblPrEx")

    if is_empty:
        return

    existing = clone._tr.tc_lst
    for index, cell in enumerate(row_cells(source)):
        if index == 0 and existing:
            tc = existing[0]
        else:
            tc = clone._tr.add_tc()
        clone_table_cell(_Cell(tc, clone.table), cell)


def clone_table_cell(clone: _Cell, source: _Cell, from_index: int = 0,
                     to_index: Optional[int] = None) -> None:
    """Copy cell formatting and the block children ``[from_index, to_index)``.

    Copies land before the default paragraph of ``clone``; that trailing paragraph is
    removed afterwards. An invalid range copies the cell formatting only.
    """
    _replace_properties(clone._tc, source._tc, "w:tcPr")

    blocks = body_elements(source)
    if to_index is None:
        to_index = len(blocks)
    if not (0 <= from_index <= to_index <= len(blocks)):
        logger.debug(f"Cell range [{from_index}, {to_index}) outside 0..{len(blocks)}; formatting only")
        return

    tc = clone._tc
    anchor = tc.p_lst[0] if tc.p_lst else tc.add_p()

    for block in blocks[from_index:to_index]:
        if isinstance(block, Paragraph):
            new_p = OxmlElement("w:p")
            anchor.addprevious(new_p)
            clone_paragraph(Paragraph(new_p, clone), block)
        else:
            new_tbl = _new_table()
            anchor.addprevious(new_tbl)
            clone_table(Table(new_tbl, clone), block)

    tc.remove(tc.p_lst[-1])

    # A cell must end with a paragraph
    remaining = _block_children(tc)
    if not remaining or remaining[-1].tag != qn("w:p"):
        tc.add_p()


def clone_body_element(clone: BodyElement, source: BodyElement) -> None:
    """Clone a paragraph into a paragraph or a table into a table."""
    if isinstance(clone, Paragraph) and isinstance(source, Paragraph):
        clone_paragraph(clone, source)
        return
    if isinstance(clone, Table) and isinstance(source, Table):
        clone_table(clone, source)
        return
    raise WordTemplateError(
        f"Cannot clone a {type(source).__name__} into a {type(clone).__name__}"
    )


# ---------------------------------------------------------------------------
# Insert
# ---------------------------------------------------------------------------

def insert_paragraph(body, paragraph: Paragraph, pos_dest: Position) -> Optional[Paragraph]:
    """Insert a clone of ``paragraph`` into ``body`` at ``pos_dest``."""
    container = _container(body)
    element = container._element
    siblings = _block_children(element)
    index = _resolve_position(siblings, pos_dest)
    if index is None:
        return None

    new_p = _insert_at(element, siblings, index, OxmlElement("w:p"), "w:sectPr")
    new_paragraph = Paragraph(new_p, container)
    clone_paragraph(new_paragraph, paragraph)
    return new_paragraph


def insert_table(body, table: Table, pos_dest: Position) -> Optional[Table]:
    """Insert a clone of ``table`` into ``body`` at ``pos_dest``."""
    container = _container(body)
    element = container._element
    siblings = _block_children(element)
    index = _resolve_position(siblings, pos_dest)
    if index is None:
        return None

    new_tbl = _insert_at(element, siblings, index, _new_table(), "w:sectPr")
    new_table = Table(new_tbl, container)
    clone_table(new_table, table)
    return new_table


def insert_run(paragraph: Paragraph, run: Run, pos_dest: Position) -> Optional[Run]:
    """Insert a clone of ``run`` into ``paragraph`` at ``pos_dest``."""
    siblings = paragraph._p.r_lst
    index = _resolve_position(siblings, pos_dest)
    if index is None:
        return None

    new_r = _insert_at(paragraph._p, siblings, index, OxmlElement("w:r"))
    new_run = Run(new_r, paragraph)
    clone_run(new_run, run)
    return new_run


def insert_table_row(table: Table, row: _Row, pos_dest: Position) -> Optional[_Row]:
    """Insert a clone of ``row`` into ``table`` at ``pos_dest``."""
    siblings = table._tbl.tr_lst
    index = _resolve_position(siblings, pos_dest)
    if index is None:
        return None

    new_tr = _insert_at(table._tbl, siblings, index, _new_row())
    new_row = _Row(new_tr, table)
    clone_table_row(new_row, row)
    return new_row


def add_table_cell(row: _Row, pos_dest: int) -> Optional[_Cell]:
    """Insert a default cell (one empty paragraph) into ``row`` at ``pos_dest``."""
    siblings = row._tr.tc_lst
    index = _resolve_position(siblings, pos_dest)
    if index is None:
        return None

    new_tc = _insert_at(row._tr, siblings, index, CT_Tc.new())
    return _Cell(new_tc, row.table)


def insert_table_cell(row: _Row, cell: _Cell, pos_dest: Position) -> Optional[_Cell]:
    """Insert a clone of ``cell`` into ``row`` at ``pos_dest``."""
    index = _resolve_position(row._tr.tc_lst, pos_dest)
    if index is None:
        return None

    new_cell = add_table_cell(row, index)
    clone_table_cell(new_cell, cell)
    return new_cell


# ---------------------------------------------------------------------------
# Remove
# ---------------------------------------------------------------------------

def _remove_child(parent, siblings: List, index: int) -> bool:
    if 0 <= index < len(siblings):
        parent.remove(siblings[index])
        return True
    return False


def remove_run(paragraph: Paragraph, index: int) -> bool:
    return _remove_child(paragraph._p, paragraph._p.r_lst, index)


def remove_table_row(table: Table, index: int) -> bool:
    return _remove_child(table._tbl, table._tbl.tr_lst, index)


def remove_table_cell(row: _Row, index: int) -> bool:
    return _remove_child(row._tr, row._tr.tc_lst, index)


def remove_body_element(body, index: int) -> bool:
    """Remove the paragraph or table at ``index`` together with its subtree."""
    element = _container(body)._element
    return _remove_child(element, _block_children(element), index)


# ---------------------------------------------------------------------------
# Split
# ---------------------------------------------------------------------------
# Each split leaves the content at and after ``pos`` in the original node and moves
# the content before ``pos`` into a new sibling placed immediately before it.

def split_run(run: Run, pos: int) -> Optional[Run]:
    text = run.text
    if not (0 < pos < len(text)):
        return None

    new_r = OxmlElement("w:r")
    run._r.addprevious(new_r)
    before = Run(new_r, run._parent)
    clone_run(before, run, is_empty=True)
    set_run_text(before, text[:pos])
    slice_run_text(run, pos)
    return before


def split_paragraph(paragraph: Paragraph, pos: int) -> Optional[Paragraph]:
    if not (0 < pos < len(paragraph._p.r_lst)):
        return None

    new_p = OxmlElement("w:p")
    paragraph._p.addprevious(new_p)
    before = Paragraph(new_p, paragraph._parent)
    clone_paragraph(before, paragraph)

    while remove_run(before, pos):
        pass
    while pos > 0:
        pos -= 1
        remove_run(paragraph, pos)
    return before


def split_table(table: Table, pos: int) -> Optional[Table]:
    if not (0 < pos < len(table._tbl.tr_lst)):
        return None

    new_tbl = _new_table()
    table._tbl.addprevious(new_tbl)
    before = Table(new_tbl, table._parent)
    clone_table(before, table)

    while remove_table_row(before, pos):
        pass
    while pos > 0:
        pos -= 1
        remove_table_row(table, pos)
    return before


def split_table_row(row: _Row, pos: int) -> Optional[_Row]:
    if not (0 < pos < len(row._tr.tc_lst)):
        return None

    new_tr = _new_row()
    row._tr.addprevious(new_tr)
    before = _Row(new_tr, row.table)
    clone_table_row(before, row)

    while remove_table_cell(before, pos):
        pass
    while pos > 0:
        pos -= 1
        remove_table_cell(row, pos)
    return before


def split_table_cell(cell: _Cell, pos: int) -> Optional[Tuple[_Cell, _Cell]]:
    """Replace ``cell`` by two cells holding its blocks before and from ``pos``.

    The original cell is removed from its row, so the returned pair replaces it.
    """
    count = len(body_elements(cell))
    if not (0 < pos < count):
        return None

    tr = cell._tc.getparent()
    if tr is None:
        raise WordTemplateError("Cannot split a table cell that is not inside a row")
    row = _Row(tr, cell._parent)
    index = tr.tc_lst.index(cell._tc)

    after = add_table_cell(row, index)
    before = add_table_cell(row, index)
    clone_table_cell(before, cell, 0, pos)
    clone_table_cell(after, cell, pos, count)
    remove_table_cell(row, index + 2)
    return before, after
