"""Domain layer: errors and constants."""

from .errors import (
    EmptyTemplateSetError,
    ErrorCodes,
    TemplateCompileError,
    TemplateIOError,
    TemplateNotFoundError,
    TemplatePatternError,
    TemplateRemovedError,
    TemplateRenderError,
    TemplateSetError,
    TemplateTraversalError,
)

__all__ = [
    "TemplateSetError",
    "TemplateTraversalError",
    "TemplatePatternError",
    "TemplateIOError",
    "TemplateCompileError",
    "EmptyTemplateSetError",
    "TemplateNotFoundError",
    "TemplateRemovedError",
    "TemplateRenderError",
    "ErrorCodes",
]
