"""Fill ``${...}`` markers in Word documents without disturbing formatting."""

from .errors import WordTemplateError
from .instructions import (
    Instruction,
    InstructionKind,
    InstructionManager,
    InstructionRegistry,
    InterpolationInstructionManager,
)
from .parser import WordTemplate, WordTemplateParser
from .settings import TemplateSettings

__version__ = "1.0.0"

__all__ = [
    "Instruction",
    "InstructionKind",
    "InstructionManager",
    "InstructionRegistry",
    "InterpolationInstructionManager",
    "TemplateSettings",
    "WordTemplate",
    "WordTemplateError",
    "WordTemplateParser",
]
