from dataclasses import dataclass
from typing import List, Optional, Tuple

INSTRUCTION_PATTERN = r"\$\{.*?\}|</?#.*?>"
INTERPOLATION_PATTERN = r"\$\{.*?\}"


CLI_ARG_PAIRS: List[Tuple[str, str]] = [
    # Traversal
    ("--no-headers", "include_headers"),
    ("--no-footers", "include_footers"),
    ("--no-tables", "scan_tables"),
    # Loading
    ("--keep-revisions", "accept_tracked_changes"),
    # Evaluation
    ("--lenient", "strict_undefined"),
]

CLI_ARG_MAP = dict(CLI_ARG_PAIRS)
FIELD_TO_CLI = {field: flag for flag, field in CLI_ARG_PAIRS}


@dataclass
class TemplateSettings:
    """Settings controlling how a Word template is scanned and evaluated."""

    # Marker syntax
    instruction_pattern: str = INSTRUCTION_PATTERN
    interpolation_pattern: str = INTERPOLATION_PATTERN
    variable_start: str = "${"
    variable_end: str = "}"

    # Evaluation
    strict_undefined: bool = True  # missing model keys are errors
    evaluate_on_parse: bool = False

    # Traversal
    include_headers: bool = True
    include_footers: bool = True
    scan_tables: bool = True

    # Loading
    accept_tracked_changes: bool = True

    @classmethod
    def from_cli_args(
        cls, args: List[str], base: Optional["TemplateSettings"] = None
    ) -> "TemplateSettings":
        """Parse CLI flags into settings. Each known flag turns its field off."""
        settings = base if base is not None else cls()
        for arg in args:
            if arg in CLI_ARG_MAP:
                setattr(settings, CLI_ARG_MAP[arg], False)
        return settings

    def to_cli_args(self) -> List[str]:
        """Generate the CLI flags that reproduce any disabled switch."""
        args: List[str] = []
        for field_name, flag in FIELD_TO_CLI.items():
            if not getattr(self, field_name):
                args.append(flag)
        return args

