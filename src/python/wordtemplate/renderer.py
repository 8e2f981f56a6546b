"""
Renderer Module for wordtemplate

Single entry point for filling a template file from a data model.
Provides consistent logging, validation and error reporting for the CLI and for
library callers.
"""

import logging
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Dict, Optional

from .docx_io import load_document, save_document
from .errors import WordTemplateError
from .instructions import InstructionRegistry
from .parser import WordTemplate, WordTemplateParser
from .settings import TemplateSettings

EXIT_OK = 0
EXIT_TEMPLATE_ERROR = 1
EXIT_INVALID_PARAMETERS = 2


class InvalidParametersError(ValueError):
    exit_code = EXIT_INVALID_PARAMETERS


def setup_logging(debug: bool = False, log_path: Optional[str] = None) -> None:
    """Setup unified logging configuration."""
    level = logging.DEBUG if debug else logging.INFO
    format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_path) if log_path else logging.NullHandler()
        ]
    )

    logger = logging.getLogger(__name__)
    logger.debug("Renderer logging initialized")


def validate_parameters(input_path: str, output_path: str) -> None:
    """Validate input parameters before processing."""
    logger = logging.getLogger(__name__)

    if not os.path.exists(input_path):
        raise InvalidParametersError(f"Input file not found: {input_path}")

    if not input_path.lower().endswith('.docx'):
        raise InvalidParametersError(f"Input file must be a DOCX file: {input_path}")

    if not output_path.lower().endswith('.docx'):
        raise InvalidParametersError(f"Output file must be a DOCX file: {output_path}")

    if os.path.abspath(input_path) == os.path.abspath(output_path):
        raise InvalidParametersError("Output file must differ from the input template")

    if os.path.dirname(output_path):
        os.makedirs(os.path.dirname(output_path), exist_ok=True)

    logger.debug(f"Parameters validated: input={input_path}, output={output_path}")


def render_document(
    document,
    model: Optional[Dict[str, Any]],
    registry: Optional[InstructionRegistry] = None,
    settings: Optional[TemplateSettings] = None,
) -> WordTemplate:
    """Locate every instruction of an open document and apply it against ``model``."""
    settings = settings or TemplateSettings()
    registry = registry or InstructionRegistry.from_settings(settings)
    parser = WordTemplateParser(registry, settings)

    template = parser.parse(document, model)
    if not settings.evaluate_on_parse:
        registry.process_template(template, model)
    return template


def render_template_file(
    input_path: str,
    output_path: str,
    model: Optional[Dict[str, Any]],
    settings: Optional[TemplateSettings] = None,
    debug: bool = False,
    log_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Fill ``input_path`` with ``model`` and write the result to ``output_path``.

    The template is edited in memory; the output file is written only once every
    instruction has been applied.

    Returns:
        Dictionary with success, exit_code, duration, instruction_count and error
    """
    logger = logging.getLogger(__name__)
    settings = settings or TemplateSettings()

    setup_logging(debug, log_path)

    logger.info(f"Input: {input_path}")
    logger.info(f"Output: {output_path}")
    start_time = datetime.now()

    try:
        validate_parameters(input_path, output_path)

        document = load_document(input_path, settings.accept_tracked_changes)
        template = render_document(document, model, settings=settings)
        save_document(document, output_path)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"Rendered {len(template)} instruction(s) in {duration:.2f} seconds")
        return {
            'success': True,
            'exit_code': EXIT_OK,
            'duration': duration,
            'instruction_count': len(template),
            'error': None,
            'input_file': input_path,
            'output_file': output_path,
        }

    except (WordTemplateError, InvalidParametersError) as e:
        logger.error(f"Rendering failed: {str(e)}")
        logger.debug(f"Full traceback: {traceback.format_exc()}")

        return {
            'success': False,
            'exit_code': getattr(e, 'exit_code', EXIT_TEMPLATE_ERROR),
            'duration': (datetime.now() - start_time).total_seconds(),
            'instruction_count': 0,
            'error': str(e),
            'input_file': input_path,
            'output_file': None,
        }
