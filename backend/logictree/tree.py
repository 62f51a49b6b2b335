"""
Expression tree for boolean decision logic.

A tree is either a Leaf holding one predicate expression or a Node that
combines an ordered list of child trees under AND / OR. Combining a tree
folds it into a single expression for the template engine:

    milk = new_node("and", new_leaf("ge .Milk 4"), new_leaf("le .Milk 6"))
    milk.combine()
    # 'and ((ge .Milk 4)) ((le .Milk 6))'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Tuple, Union

from .errors import EmptyNodeError, InvalidOperatorError

if TYPE_CHECKING:
    from .compiler import CompiledExpression


class Operator(str, Enum):
    """How the children of a node are combined."""

    LEAF = "leaf"
    AND = "and"
    OR = "or"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Union["Operator", str]) -> "Operator":
        """
        Look up an operator by value.

        Raises:
            InvalidOperatorError: If the value is not a known operator.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidOperatorError(value) from None

    @property
    def combines(self) -> bool:
        """Whether this operator can join child expressions."""
        return self is not Operator.LEAF

    def apply(self, exprs: Sequence[str]) -> str:
        """
        Combine expressions into one, folding to the right.

        The first expression pairs with the application of the operator to
        everything after it:

            and (e0) (and (e1) (e2))
        """
        if not self.combines:
            raise InvalidOperatorError(self.value, "leaf is not a combining operator")

        if len(exprs) == 0:
            return ""
        if len(exprs) == 1:
            return exprs[0]
        acc = exprs[-1]
        for expr in reversed(exprs[:-1]):
            acc = f"{self.value} ({expr}) ({acc})"
        return acc


def apply(op: Union[Operator, str], exprs: Sequence[str]) -> str:
    """Apply an operator to an ordered list of expressions."""
    return Operator.parse(op).apply(exprs)


@dataclass(frozen=True)
class Leaf:
    """
    A terminal predicate.

    Attributes:
        value: The expression, already wrapped in parentheses.
    """

    value: str

    @classmethod
    def wrap(cls, expression: str) -> "Leaf":
        """Create a leaf, parenthesizing the expression so it binds as one token."""
        return cls("(" + expression + ")")

    @property
    def op(self) -> Operator:
        return Operator.LEAF

    def combine(self) -> str:
        return self.value

    def get_template(
        self, funcs: Optional[Dict[str, Callable[..., Any]]] = None
    ) -> "CompiledExpression":
        """Compile this leaf on its own."""
        from .compiler import compile_tree
        return compile_tree(self, funcs)


@dataclass(frozen=True)
class Node:
    """
    A composite node combining child trees with an operator.

    Attributes:
        op: AND or OR.
        children: Ordered child trees; order decides the fold order.
    """

    op: Operator
    children: Tuple["Tree", ...] = field(default_factory=tuple)

    def __post_init__(self):
        op = Operator.parse(self.op)
        if not op.combines:
            raise InvalidOperatorError(op.value, "a composite node needs and/or, not leaf")

        children = tuple(self.children)
        for child in children:
            if not isinstance(child, (Leaf, Node)):
                raise TypeError(f"Expected Leaf or Node child, got {type(child).__name__}")

        object.__setattr__(self, "op", op)
        object.__setattr__(self, "children", children)

    def combine(self) -> str:
        """
        Merge this node with all of its (combined) children.

        Raises:
            EmptyNodeError: If this node or any descendant node has no children.
        """
        if not self.children:
            raise EmptyNodeError()

        exprs = [child.combine() for child in self.children]
        return self.op.apply(exprs)

    def get_template(
        self, funcs: Optional[Dict[str, Callable[..., Any]]] = None
    ) -> "CompiledExpression":
        """Squash the tree into a single compiled template expression."""
        from .compiler import compile_tree
        return compile_tree(self, funcs)


Tree = Union[Leaf, Node]


def new_leaf(expression: str) -> Leaf:
    """Return a new leaf for the expression."""
    return Leaf.wrap(expression)


def new_node(op: Union[Operator, str], *children: Tree) -> Node:
    """Return a sub-tree combining the children with the operator."""
    return Node(Operator.parse(op), children)
