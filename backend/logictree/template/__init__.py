"""
Template engine for compiled logic trees.

Parses text with ``{{ ... }}`` actions and executes it against a data
context, with caller supplied helper functions.
"""

from __future__ import annotations

from typing import Any, Callable, List, Mapping, Optional

from ..errors import TemplateError
from .evaluator import NO_VALUE, TemplateEvaluator
from .parser import BUILTINS, RESERVED, Action, Segment, TemplateParser


class Template:
    """
    A parsed template.

    Example:
        >>> t = Template("tree").parse("{{ gt .Price 5 }}")
        >>> t.execute({"Price": 8})
        'true'
    """

    def __init__(
        self,
        name: str = "tree",
        funcs: Optional[Mapping[str, Callable[..., Any]]] = None,
        missing_key: str = "default",
    ):
        """
        Initialize an empty template.

        Args:
            name: Template name, used in error messages.
            funcs: Helper functions available to actions, by name.
            missing_key: "default" or "error", see TemplateEvaluator.
        """
        funcs = dict(funcs or {})
        reserved = RESERVED.intersection(funcs)
        if reserved:
            raise TemplateError(f"template {name}: reserved function name {sorted(reserved)[0]!r}")
        for fname, func in funcs.items():
            if not callable(func):
                raise TemplateError(f"template {name}: value for {fname!r} not a function")

        self.name = name
        self.funcs = funcs
        self.source = ""
        self.segments: List[Segment] = []
        self._parser = TemplateParser(funcs.keys())
        self._evaluator = TemplateEvaluator(funcs, missing_key=missing_key)

    def parse(self, text: str) -> "Template":
        """Parse text into this template and return it."""
        self.segments = self._parser.parse(text)
        self.source = text
        return self

    @property
    def actions(self) -> List[Action]:
        return [s for s in self.segments if isinstance(s, Action)]

    def values(self, data: Any = None) -> List[Any]:
        """Evaluate every action and return the raw values."""
        return [self._evaluator.evaluate(a.logic, data) for a in self.actions]

    def execute(self, data: Any = None) -> str:
        """Render the template against data."""
        parts = []
        for segment in self.segments:
            if isinstance(segment, Action):
                value = self._evaluator.evaluate(segment.logic, data)
                parts.append(self._evaluator.render(value))
            else:
                parts.append(segment)
        return "".join(parts)

    @staticmethod
    def to_bool(value: Any) -> bool:
        return TemplateEvaluator.to_bool(value)

    def __repr__(self) -> str:
        return f"Template(name={self.name!r}, source={self.source!r})"


__all__ = [
    "Action",
    "BUILTINS",
    "NO_VALUE",
    "Template",
    "TemplateEvaluator",
    "TemplateParser",
]
