"""
Instruction recognizers and the registry that dispatches to them.

An instruction is tagged with its ``kind``. Recognizers are asked in registration
order whether they own a marker; when evaluating, every recognizer sees every
instruction and acts only on its own kind.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

import regex as re
from docx.text.run import Run

from .docx_edit import set_run_text
from .errors import WordTemplateError
from .settings import INTERPOLATION_PATTERN
from .template_engine import TemplateEngine, evaluate

logger = logging.getLogger(__name__)

Evaluator = Callable[[str, Optional[Dict[str, Any]]], str]


class InstructionKind(Enum):
    """Kinds of marker the locator can hand to a recognizer."""
    INTERPOLATION = "interpolation"
    DIRECTIVE = "directive"  # <#...> tags; no recognizer ships for them yet


@dataclass(eq=False)
class Instruction:
    """A marker bound to the run that holds exactly its text."""
    kind: InstructionKind
    expression: str
    run: Run


class InstructionManager(ABC):
    """Recognizer, factory and executor for one instruction kind."""

    kind: InstructionKind

    @abstractmethod
    def is_of_type(self, expression: str) -> bool:
        ...

    @abstractmethod
    def create_instruction(self, expression: str, run: Run) -> Instruction:
        ...

    @abstractmethod
    def process_instruction(self, instruction: Instruction, model: Optional[Dict[str, Any]]) -> None:
        ...


class InterpolationInstructionManager(InstructionManager):
    """Replace ``${...}`` markers with the evaluated expression."""

    kind = InstructionKind.INTERPOLATION

    def __init__(self, evaluator: Optional[Evaluator] = None,
                 pattern: str = INTERPOLATION_PATTERN):
        self.evaluator = evaluator or evaluate
        self._pattern = re.compile(pattern)

    def is_of_type(self, expression: str) -> bool:
        return self._pattern.search(expression) is not None

    def create_instruction(self, expression: str, run: Run) -> Instruction:
        return Instruction(self.kind, expression, run)

    def process_instruction(self, instruction: Instruction, model: Optional[Dict[str, Any]]) -> None:
        if instruction.kind is not self.kind:
            return
        value = self.evaluate_expression(instruction.expression, model)
        set_run_text(instruction.run, value)

    def evaluate_expression(self, expression: str, model: Optional[Dict[str, Any]]) -> str:
        try:
            value = self.evaluator(expression, model)
        except WordTemplateError:
            raise
        except Exception as exc:
            raise WordTemplateError(f"Evaluator failed on {expression!r}: {exc}") from exc
        return "" if value is None else str(value)


class InstructionRegistry:
    """Ordered set of recognizers, constructed and owned by the caller."""

    def __init__(self, managers: Optional[Iterable[InstructionManager]] = None):
        if managers is None:
            managers = [InterpolationInstructionManager()]
        self.managers: List[InstructionManager] = list(managers)

    @classmethod
    def from_settings(cls, settings) -> "InstructionRegistry":
        """Registry whose interpolation engine follows ``settings``."""
        engine = TemplateEngine(
            variable_start=settings.variable_start,
            variable_end=settings.variable_end,
            strict=settings.strict_undefined,
        )
        return cls([InterpolationInstructionManager(engine, settings.interpolation_pattern)])

    def register(self, manager: InstructionManager) -> None:
        self.managers.append(manager)

    def create_instruction(self, expression: str, run: Run) -> Optional[Instruction]:
        """Build the instruction for ``expression``; the first matching recognizer wins."""
        for manager in self.managers:
            if manager.is_of_type(expression):
                return manager.create_instruction(expression, run)
        logger.debug(f"No recognizer for marker {expression!r}")
        return None

    def process_instruction(self, instruction: Instruction, model: Optional[Dict[str, Any]]) -> None:
        for manager in self.managers:
            manager.process_instruction(instruction, model)

    def process_template(self, template: Iterable[Instruction], model: Optional[Dict[str, Any]]) -> int:
        """Apply every instruction in order and return how many were processed."""
        count = 0
        for instruction in template:
            self.process_instruction(instruction, model)
            count += 1
        return count
