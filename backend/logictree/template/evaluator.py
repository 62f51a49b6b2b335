"""
Template Evaluator.

Evaluates parsed template actions against a data context.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..errors import TemplateExecError


NO_VALUE = "<no value>"

_COMPARISONS: Dict[str, Callable[[Any, Any], bool]] = {
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
}


class TemplateEvaluator:
    """
    Evaluator for parsed template actions.

    Supports the builtin functions:
    - and / or: Short-circuit, return the deciding operand
    - not: Boolean negation
    - eq, ne, lt, le, gt, ge: Comparisons
    - len: Length of a string, list or mapping
    - print: Render operands as text

    Helper functions are looked up first, so a helper registered under a
    builtin name replaces that builtin.
    """

    def __init__(
        self,
        funcs: Optional[Mapping[str, Callable[..., Any]]] = None,
        missing_key: str = "default",
    ):
        """
        Initialize the evaluator.

        Args:
            funcs: Helper functions by name.
            missing_key: "default" to yield None for missing fields, "error" to raise.
        """
        self.funcs = dict(funcs or {})
        self.missing_key = missing_key

    def evaluate(self, logic: Any, data: Any) -> Any:
        """
        Evaluate a parsed action against data.

        Args:
            logic: The parsed action.
            data: The data context.

        Returns:
            The evaluation result.

        Raises:
            TemplateExecError: If a function fails or operands are incompatible.
        """
        # Literals evaluate to themselves
        if not isinstance(logic, dict):
            return logic

        if len(logic) != 1:
            raise TemplateExecError(f"malformed node: {logic!r}")

        name = list(logic.keys())[0]
        args = logic[name]

        if name == "var":
            return self._get_var(args, data)

        if name in self.funcs:
            return self._call(name, args, data)

        if name == "and":
            return self._eval_and(args, data)

        if name == "or":
            return self._eval_or(args, data)

        if name == "not":
            self._check_arity(name, args, 1)
            return not self.to_bool(self.evaluate(args[0], data))

        if name == "eq":
            return self._eval_eq(args, data)

        if name in _COMPARISONS:
            return self._eval_comparison(name, args, data)

        if name == "len":
            return self._eval_len(args, data)

        if name == "print":
            return self._eval_print(args, data)

        return self._call(name, args, data)

    def _get_var(self, path: str, data: Any) -> Any:
        """Get a field from data using dot notation."""
        if not path:
            return data

        current = data
        for part in path.split("."):
            if current is None:
                return None
            if isinstance(current, Mapping):
                if part not in current:
                    if self.missing_key == "error":
                        raise TemplateExecError(f'map has no entry for key "{part}"')
                    return None
                current = current[part]
            elif hasattr(current, part):
                current = getattr(current, part)
            else:
                raise TemplateExecError(
                    f"can't evaluate field {part} in type {type(current).__name__}"
                )

        return current

    def _eval_and(self, args: List, data: Any) -> Any:
        """Evaluate AND: the first falsy operand, or the last one."""
        if not args:
            raise TemplateExecError("wrong number of args for and: want at least 1 got 0")

        value = None
        for arg in args:
            value = self.evaluate(arg, data)
            if not self.to_bool(value):
                return value
        return value

    def _eval_or(self, args: List, data: Any) -> Any:
        """Evaluate OR: the first truthy operand, or the last one."""
        if not args:
            raise TemplateExecError("wrong number of args for or: want at least 1 got 0")

        value = None
        for arg in args:
            value = self.evaluate(arg, data)
            if self.to_bool(value):
                return value
        return value

    def _eval_eq(self, args: List, data: Any) -> bool:
        """Evaluate eq: true if the first operand equals any of the others."""
        if len(args) < 2:
            raise TemplateExecError(f"wrong number of args for eq: want at least 2 got {len(args)}")

        first = self.evaluate(args[0], data)
        return any(first == self.evaluate(arg, data) for arg in args[1:])

    def _eval_comparison(self, name: str, args: List, data: Any) -> bool:
        """Evaluate an ordering comparison."""
        self._check_arity(name, args, 2)

        left = self.evaluate(args[0], data)
        right = self.evaluate(args[1], data)

        try:
            return _COMPARISONS[name](left, right)
        except TypeError:
            raise TemplateExecError(
                f"error calling {name}: incompatible types for comparison: "
                f"{type(left).__name__} and {type(right).__name__}"
            ) from None

    def _eval_len(self, args: List, data: Any) -> int:
        """Evaluate len expression."""
        self._check_arity("len", args, 1)
        value = self.evaluate(args[0], data)
        try:
            return len(value)
        except TypeError:
            raise TemplateExecError(f"len of type {type(value).__name__}") from None

    def _eval_print(self, args: List, data: Any) -> str:
        """Render operands, spacing them unless next to a string."""
        values = [self.evaluate(arg, data) for arg in args]
        parts = []
        for i, value in enumerate(values):
            if i > 0 and not isinstance(value, str) and not isinstance(values[i - 1], str):
                parts.append(" ")
            parts.append(self.render(value))
        return "".join(parts)

    def _call(self, name: str, args: List, data: Any) -> Any:
        """Call a helper function with evaluated arguments."""
        if name not in self.funcs:
            raise TemplateExecError(f'function "{name}" not defined')

        values = [self.evaluate(arg, data) for arg in args]
        try:
            return self.funcs[name](*values)
        except TemplateExecError:
            raise
        except Exception as e:
            raise TemplateExecError(f"error calling {name}: {e}") from e

    def _check_arity(self, name: str, args: List, count: int) -> None:
        if len(args) != count:
            raise TemplateExecError(f"wrong number of args for {name}: want {count} got {len(args)}")

    @staticmethod
    def to_bool(value: Any) -> bool:
        """Convert value to boolean (empty and zero values are false)."""
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            return len(value) > 0
        if isinstance(value, (list, tuple, dict)):
            return len(value) > 0
        return bool(value)

    @staticmethod
    def render(value: Any) -> str:
        """Render a value as template output."""
        if value is None:
            return NO_VALUE
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
