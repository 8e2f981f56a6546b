"""
Default expression evaluator backed by Jinja2.

A marker such as ``${customer.name | upper}`` is rendered as a one-line Jinja2
template whose variable delimiters are ``${`` and ``}``, so the whole marker text is
passed to the engine unchanged.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from jinja2 import Environment, StrictUndefined, Template, TemplateError, Undefined

from .errors import WordTemplateError

logger = logging.getLogger(__name__)


class TemplateEngine:
    """Evaluate marker expressions against a data model."""

    def __init__(
        self,
        variable_start: str = "${",
        variable_end: str = "}",
        strict: bool = True,
        autoescape: bool = False,
    ):
        self.env = Environment(
            variable_start_string=variable_start,
            variable_end_string=variable_end,
            undefined=StrictUndefined if strict else Undefined,
            autoescape=autoescape,
            keep_trailing_newline=True,
        )

    def create_template(self, expression: str) -> Template:
        try:
            return self.env.from_string(expression)
        except TemplateError as exc:
            raise WordTemplateError(f"Invalid expression {expression!r}: {exc}") from exc

    def process_template(self, expression: str, model: Optional[Dict[str, Any]]) -> str:
        """Render ``expression`` with ``model`` as the root namespace."""
        template = self.create_template(expression)
        try:
            return template.render(model or {})
        except WordTemplateError:
            raise
        except Exception as exc:
            logger.debug(f"Evaluation of {expression!r} failed: {exc}")
            raise WordTemplateError(f"Cannot evaluate {expression!r}: {exc}") from exc

    __call__ = process_template


@lru_cache(maxsize=None)
def default_engine() -> TemplateEngine:
    """Strict engine using the ``${...}`` delimiters, built on first use."""
    return TemplateEngine()


def evaluate(expression: str, model: Optional[Dict[str, Any]]) -> str:
    return default_engine().process_template(expression, model)
