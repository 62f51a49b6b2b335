"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from backend.logictree import new_leaf, new_node
from backend.logictree.config import get_settings


EXAMPLE_EXPRESSION = (
    "or (and (and ((ge .Milk 4)) ((le .Milk 6))) "
    "(and ((ge .Onions 1)) ((le .Onions 2)))) ((gt .Toothpaste 5))"
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from LOGICTREE_* environment variables."""
    for name in ("LOGICTREE_LOG_LEVEL", "LOGICTREE_TEMPLATE_NAME", "LOGICTREE_MISSING_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def milk_tree():
    return new_node("and", new_leaf("ge .Milk 4"), new_leaf("le .Milk 6"))


@pytest.fixture
def onion_tree():
    return new_node("and", new_leaf("ge .Onions 1"), new_leaf("le .Onions 2"))


@pytest.fixture
def example_tree(milk_tree, onion_tree):
    """Milk between 4 and 6 and onions between 1 and 2, or toothpaste over 5."""
    return new_node(
        "or",
        new_node("and", milk_tree, onion_tree),
        new_leaf("gt .Toothpaste 5"),
    )


@pytest.fixture
def example_expression():
    return EXAMPLE_EXPRESSION
