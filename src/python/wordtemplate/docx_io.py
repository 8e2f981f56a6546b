import json
import logging
import os
from typing import Any, Dict, Iterator, List

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from .docx_revisions import accept_revisions
from .errors import WordTemplateError

logger = logging.getLogger(__name__)


def load_document(path: str, accept_tracked_changes: bool = True):
    """Open a .docx template, accepting tracked changes unless told otherwise."""
    if not os.path.exists(path):
        raise WordTemplateError(f"Template not found: {path}")
    try:
        document = Document(path)
    except (PackageNotFoundError, KeyError, ValueError) as exc:
        raise WordTemplateError(f"Not a readable DOCX file: {path}") from exc

    logger.debug(f"Loaded template {path} ({len(document.sections)} section(s))")
    if accept_tracked_changes:
        accept_revisions(document)
    return document


def save_document(document, path: str) -> None:
    try:
        document.save(path)
    except OSError as exc:
        raise WordTemplateError(f"Failed to write {path}: {exc}") from exc


def _iter_story_parts(document, attributes) -> Iterator:
    # Sections share definitions through "linked to previous"; yield each one once
    seen: List = []
    for section in document.sections:
        for name in attributes:
            story = getattr(section, name)
            if story.is_linked_to_previous:
                continue
            element = story._element
            if any(element is other for other in seen):
                continue
            seen.append(element)
            yield story


def iter_headers(document) -> Iterator:
    return _iter_story_parts(document, ("header", "first_page_header", "even_page_header"))


def iter_footers(document) -> Iterator:
    return _iter_story_parts(document, ("footer", "first_page_footer", "even_page_footer"))


def iter_bodies(document, include_headers: bool = True, include_footers: bool = True) -> Iterator:
    """Headers, then footers, then the main body."""
    if include_headers:
        yield from iter_headers(document)
    if include_footers:
        yield from iter_footers(document)
    yield document._body


def load_model(path: str) -> Dict[str, Any]:
    """Read a JSON data model; the top level must be an object."""
    try:
        with open(path, "r", encoding="utf-8") as handle:
            model = json.load(handle)
    except OSError as exc:
        raise WordTemplateError(f"Cannot read model file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise WordTemplateError(f"Invalid JSON in model file {path}: {exc}") from exc

    if not isinstance(model, dict):
        raise WordTemplateError(f"Model file {path} must contain a JSON object")
    return model
