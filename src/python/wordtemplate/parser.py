"""
Locate ``${...}`` and ``<#...>`` markers in a Word document.

Each marker is first isolated into a run of its own, so that evaluating it later is
a plain text assignment on that run and the surrounding formatting stays untouched.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import regex as re
from docx.table import Table
from docx.text.paragraph import Paragraph

from .docx_edit import body_elements, row_cells, table_rows
from .docx_io import iter_bodies
from .instructions import Instruction, InstructionRegistry
from .run_isolation import find_isolated_run, isolate_range, paragraph_text
from .settings import TemplateSettings

logger = logging.getLogger(__name__)


@dataclass
class WordTemplate:
    """Instructions of a parsed document, in document order."""
    instructions: Tuple[Instruction, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def expressions(self) -> List[str]:
        return [instruction.expression for instruction in self.instructions]


class WordTemplateParser:
    def __init__(self, registry: Optional[InstructionRegistry] = None,
                 settings: Optional[TemplateSettings] = None):
        self.settings = settings or TemplateSettings()
        self.registry = registry or InstructionRegistry.from_settings(self.settings)
        self._pattern = re.compile(self.settings.instruction_pattern)

    def parse(self, document, model: Optional[Dict[str, Any]] = None) -> WordTemplate:
        """Collect the instructions of headers, footers and the main body.

        With ``evaluate_on_parse`` set, the instructions are applied against ``model``
        once they have all been located.
        """
        instructions: List[Instruction] = []
        for body in iter_bodies(
            document,
            include_headers=self.settings.include_headers,
            include_footers=self.settings.include_footers,
        ):
            instructions.extend(self.find_instructions(body))

        template = WordTemplate(tuple(instructions))
        logger.info(f"Found {len(template)} instruction(s)")

        if self.settings.evaluate_on_parse:
            self.registry.process_template(template, model)
        return template

    def find_instructions(self, body) -> List[Instruction]:
        """Instructions in a body, header, footer or table cell."""
        instructions: List[Instruction] = []
        for element in body_elements(body):
            if isinstance(element, Paragraph):
                instructions.extend(self.find_paragraph_instructions(element))
            elif isinstance(element, Table) and self.settings.scan_tables:
                for row in table_rows(element):
                    for cell in row_cells(row):
                        instructions.extend(self.find_instructions(cell))
        return instructions

    def find_paragraph_instructions(self, paragraph: Paragraph) -> List[Instruction]:
        instructions: List[Instruction] = []
        # Isolation only reshapes runs, so offsets into the original text stay valid
        text = paragraph_text(paragraph)
        for match in self._pattern.finditer(text):
            expression = match.group()
            if not expression:
                continue
            if not isolate_range(paragraph, match.start(), match.end() - 1):
                continue

            run = find_isolated_run(paragraph, match.start(), expression)
            if run is None:
                logger.debug(f"Marker {expression!r} at {match.start()} not bound to a run, dropped")
                continue

            instruction = self.registry.create_instruction(expression, run)
            if instruction is None:
                continue
            logger.debug(f"Isolated {instruction.kind.value} marker {expression!r}")
            instructions.append(instruction)
        return instructions
