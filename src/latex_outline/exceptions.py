"""Custom exceptions for latex_outline."""


class LatexOutlineError(Exception):
    """Base exception for latex_outline operations."""


class ConfigurationError(LatexOutlineError):
    """Outline settings are inconsistent."""


class SourceNotAvailableError(LatexOutlineError):
    """Content or AST for a file could not be produced."""


class LatexParseError(SourceNotAvailableError):
    """Source text could not be turned into an AST."""
