"""
Compilation of logic trees into executable template expressions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .config import Settings, get_settings
from .template import Template
from .tree import Tree

logger = logging.getLogger(__name__)


def wrap_action(expression: str) -> str:
    """Embed an expression in template action delimiters."""
    return "{{ " + expression + " }}"


@dataclass(frozen=True)
class CompiledExpression:
    """
    A tree squashed into a single parsed template.

    Attributes:
        expression: The combined tree expression.
        template: The parsed template wrapping the expression.
    """

    expression: str
    template: Template

    @property
    def source(self) -> str:
        return self.template.source

    def execute(self, context: Any = None) -> str:
        """Render the expression against a context ('true' / 'false' for boolean results)."""
        return self.template.execute(context)

    def evaluate(self, context: Any = None) -> bool:
        """Evaluate the expression against a context and return its truth value."""
        value = self.template.values(context)[0]
        return Template.to_bool(value)


def compile_tree(
    root: Tree,
    funcs: Optional[Mapping[str, Callable[..., Any]]] = None,
    settings: Optional[Settings] = None,
) -> CompiledExpression:
    """
    Squash a tree from the root down into a single template expression.

    Args:
        root: The tree to compile.
        funcs: Helper functions referenced by leaf expressions, by name.
            Passed to the template engine as-is.
        settings: Settings to use; defaults to the environment settings.

    Returns:
        The compiled expression.

    Raises:
        EmptyNodeError: If the tree contains a node without children.
        TemplateSyntaxError: If the combined expression does not parse.
    """
    settings = settings or get_settings()

    expression = root.combine()
    logger.debug("Combined tree expression: %s", expression)

    template = Template(
        settings.template_name,
        funcs=funcs,
        missing_key=settings.missing_key,
    ).parse(wrap_action(expression))

    return CompiledExpression(expression=expression, template=template)
