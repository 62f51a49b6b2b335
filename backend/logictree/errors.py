"""
Exceptions raised by logictree.
"""

from __future__ import annotations

from typing import Any, Optional


class LogicTreeError(Exception):
    """Base exception for all logictree errors."""


class EmptyNodeError(LogicTreeError):
    """Raised when a composite node without children is combined."""

    def __init__(self, message: str = "empty node cannot be merged"):
        super().__init__(message)


class InvalidOperatorError(LogicTreeError):
    """Raised for an operator value outside of the known set."""

    def __init__(self, value: Any, message: Optional[str] = None):
        self.value = value
        super().__init__(message or f"invalid operator type: {value!r}")


class InvalidRecordError(LogicTreeError):
    """
    Raised when a serialized record cannot be decoded into a tree.

    Attributes:
        path: Location of the offending record, e.g. ``Nodes[1].Op``.
    """

    def __init__(self, message: str, path: str = ""):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class TemplateError(LogicTreeError):
    """Base exception for template engine errors."""


class TemplateSyntaxError(TemplateError):
    """Raised when template text cannot be parsed."""

    def __init__(self, message: str, position: int = -1, source: str = ""):
        self.position = position
        self.source = source
        if position >= 0:
            message = f"{message} (at position {position})"
        super().__init__(message)


class TemplateExecError(TemplateError):
    """Raised when a parsed template fails during execution."""
