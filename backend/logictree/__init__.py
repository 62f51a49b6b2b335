"""
logictree: build and evaluate template based truthy trees.

This package lets callers build boolean decision logic as a tree of
predicate leaves joined by AND / OR, squash it into a single template
expression, and store or load the tree as JSON or YAML.
"""

from .errors import (
    LogicTreeError,
    EmptyNodeError,
    InvalidOperatorError,
    InvalidRecordError,
    TemplateError,
    TemplateSyntaxError,
    TemplateExecError,
)
from .tree import (
    Operator,
    Leaf,
    Node,
    Tree,
    apply,
    new_leaf,
    new_node,
)
from .codec import (
    NodeRecord,
    encode,
    decode,
    to_dict,
    from_dict,
    to_json,
    from_json,
    to_yaml,
    from_yaml,
)
from .compiler import CompiledExpression, compile_tree, wrap_action
from .template import Template

__version__ = "1.0.0"
__all__ = [
    # Errors
    "LogicTreeError",
    "EmptyNodeError",
    "InvalidOperatorError",
    "InvalidRecordError",
    "TemplateError",
    "TemplateSyntaxError",
    "TemplateExecError",
    # Tree
    "Operator",
    "Leaf",
    "Node",
    "Tree",
    "apply",
    "new_leaf",
    "new_node",
    # Codec
    "NodeRecord",
    "encode",
    "decode",
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    "to_yaml",
    "from_yaml",
    # Compiler
    "CompiledExpression",
    "compile_tree",
    "wrap_action",
    "Template",
]
