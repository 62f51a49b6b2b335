"""
Serialization of logic trees.

A tree maps to nested records of the form:

    {"Op": "or", "Nodes": [{"Op": "leaf", "Leaf": "(gt .Toothpaste 5)"}, ...]}

``Leaf`` is present only on leaf records and already carries the wrapping
parentheses; ``Nodes`` is present and non-empty only on and/or records.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, NoReturn, Optional, Sequence, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidOperatorError, InvalidRecordError
from .tree import Leaf, Node, Operator, Tree

logger = logging.getLogger(__name__)


class NodeRecord(BaseModel):
    """Serialized form of a single tree node."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    op: str = Field(..., alias="Op", description="One of leaf, and, or")
    nodes: Optional[List[NodeRecord]] = Field(
        default=None, alias="Nodes", description="Child records of an and/or node"
    )
    leaf: Optional[str] = Field(
        default=None, alias="Leaf", description="Wrapped expression of a leaf node"
    )

    def to_dict(self) -> dict:
        """Convert to a plain dictionary, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


NodeRecord.model_rebuild()


def encode(tree: Tree) -> NodeRecord:
    """Map a tree onto nested records, one per node."""
    if isinstance(tree, Leaf):
        return NodeRecord(op=Operator.LEAF.value, leaf=tree.value)
    if isinstance(tree, Node):
        return NodeRecord(op=tree.op.value, nodes=[encode(c) for c in tree.children])
    raise TypeError(f"Expected Leaf or Node, got {type(tree).__name__}")


def decode(record: Union[NodeRecord, Mapping[str, Any]]) -> Tree:
    """
    Rebuild a fresh tree from a record.

    Args:
        record: A NodeRecord or its dictionary form.

    Returns:
        The decoded tree.

    Raises:
        InvalidRecordError: If the record has an unknown operator or its
            fields do not match the operator.
    """
    if not isinstance(record, NodeRecord):
        record = _validate(record)
    return _decode(record, "")


def _decode(record: NodeRecord, path: str) -> Tree:
    try:
        op = Operator.parse(record.op)
    except InvalidOperatorError:
        _fail(f"unknown operator {record.op!r}", _join(path, "Op"))

    if op is Operator.LEAF:
        if not record.leaf:
            _fail("leaf record without a Leaf expression", path)
        if record.nodes is not None:
            _fail("leaf record cannot have Nodes", _join(path, "Nodes"))
        return Leaf(record.leaf)

    if not record.nodes:
        _fail(f"{op.value} record without Nodes", path)
    if record.leaf is not None:
        _fail(f"{op.value} record cannot have a Leaf expression", _join(path, "Leaf"))

    children = [
        _decode(child, _join(path, f"Nodes[{i}]"))
        for i, child in enumerate(record.nodes)
    ]
    return Node(op, children)


def _fail(message: str, path: str) -> NoReturn:
    logger.debug("Rejecting record at %s: %s", path or "<root>", message)
    raise InvalidRecordError(message, path)


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _format_loc(loc: Sequence[Union[str, int]]) -> str:
    """Format a pydantic error location as Nodes[0].Op."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = _join(path, part)
    return path


def _from_validation_error(e: ValidationError) -> InvalidRecordError:
    error = e.errors()[0]
    path = _format_loc(error.get("loc", ()))
    logger.debug("Record failed validation at %s: %s", path or "<root>", error["msg"])
    return InvalidRecordError(error["msg"], path)


def _validate(data: Any) -> NodeRecord:
    try:
        return NodeRecord.model_validate(data)
    except ValidationError as e:
        raise _from_validation_error(e) from e


# ---------------------------------------------------------------------------
# Textual forms
# ---------------------------------------------------------------------------

def to_dict(tree: Tree) -> dict:
    """Encode a tree as a plain dictionary."""
    return encode(tree).to_dict()


def from_dict(data: Mapping[str, Any]) -> Tree:
    """Decode a tree from a plain dictionary."""
    return decode(_validate(data))


def to_json(tree: Tree, indent: Optional[int] = 2) -> str:
    """Encode a tree as JSON."""
    return encode(tree).model_dump_json(by_alias=True, exclude_none=True, indent=indent)


def from_json(text: Union[str, bytes]) -> Tree:
    """
    Decode a tree from JSON.

    Raises:
        InvalidRecordError: If the text is not valid JSON or not a valid tree.
    """
    try:
        record = NodeRecord.model_validate_json(text)
    except ValidationError as e:
        raise _from_validation_error(e) from e
    return decode(record)


def to_yaml(tree: Tree) -> str:
    """Encode a tree as YAML."""
    return yaml.safe_dump(to_dict(tree), sort_keys=False, default_flow_style=False)


def from_yaml(text: str) -> Tree:
    """
    Decode a tree from YAML.

    Raises:
        InvalidRecordError: If the text is not valid YAML or not a valid tree.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InvalidRecordError(f"invalid YAML: {e}") from e
    return from_dict(data)
