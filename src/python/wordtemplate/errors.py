class WordTemplateError(RuntimeError):
    """Raised when a template cannot be parsed, edited or evaluated."""
