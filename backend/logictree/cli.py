"""CLI entry point for logictree."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .codec import from_json, from_yaml, to_json
from .compiler import compile_tree
from .config import get_settings
from .errors import LogicTreeError
from .tree import Node, Tree, new_leaf, new_node


console = Console()
err_console = Console(stderr=True)

YAML_SUFFIXES = {".yaml", ".yml"}

EXAMPLE_PRICES = [
    {"Milk": 5, "Onions": 0, "Toothpaste": 4},
    {"Milk": 5, "Onions": 2, "Toothpaste": 4},
    {"Milk": 5, "Onions": 0, "Toothpaste": 8},
]


def load_tree(path: Path) -> Tree:
    """Load a tree from a JSON or YAML file."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in YAML_SUFFIXES:
        return from_yaml(text)
    return from_json(text)


def parse_context(data: Optional[str], assignments: Tuple[str, ...]) -> Dict[str, Any]:
    """Build an evaluation context from a JSON object and KEY=VALUE pairs."""
    context: Dict[str, Any] = {}

    if data:
        try:
            loaded = json.loads(data)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"invalid JSON: {e}", param_hint="--data") from e
        if not isinstance(loaded, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--data")
        context.update(loaded)

    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {assignment!r}", param_hint="--set")
        # YAML scalars give us ints, floats and booleans for free
        try:
            context[key.strip()] = yaml.safe_load(value)
        except yaml.YAMLError as e:
            raise click.BadParameter(f"invalid value for {key.strip()!r}: {e}", param_hint="--set") from e

    return context


def example_tree() -> Node:
    """
    Milk between 4 and 6 and onions between 1 and 2, or toothpaste over 5.
    """
    milk_tree = new_node("and", new_leaf("ge .Milk 4"), new_leaf("le .Milk 6"))
    onion_tree = new_node("and", new_leaf("ge .Onions 1"), new_leaf("le .Onions 2"))
    return new_node("or", new_node("and", milk_tree, onion_tree), new_leaf("gt .Toothpaste 5"))


def between(value: Any, low: Any, high: Any) -> bool:
    """Whether value lies in the closed range [low, high]."""
    return low <= value <= high


@click.group()
@click.version_option(version="1.0.0")
@click.option("--log-level", default=None, help="Override LOGICTREE_LOG_LEVEL.")
def cli(log_level: Optional[str]) -> None:
    """Build, store and evaluate template based truthy trees."""
    level = (log_level or get_settings().log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise click.BadParameter(f"unknown level {level!r}", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def combine(tree_file: Path) -> None:
    """Print the combined expression of a stored tree."""
    try:
        tree = load_tree(tree_file)
        click.echo(tree.combine())
    except LogicTreeError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


@cli.command(name="compile")
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def compile_command(tree_file: Path) -> None:
    """Print the template source of a stored tree."""
    try:
        compiled = compile_tree(load_tree(tree_file))
        click.echo(compiled.source)
    except LogicTreeError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


@cli.command(name="eval")
@click.argument("tree_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--data", default=None, help="Context as a JSON object.")
@click.option("--set", "assignments", multiple=True, metavar="KEY=VALUE",
              help="Set a context value (repeatable).")
def eval_command(tree_file: Path, data: Optional[str], assignments: Tuple[str, ...]) -> None:
    """Evaluate a stored tree against a context."""
    context = parse_context(data, assignments)
    try:
        compiled = compile_tree(load_tree(tree_file))
        click.echo(compiled.execute(context))
    except LogicTreeError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


@cli.command()
def example() -> None:
    """Walk through the milk, onions and toothpaste example."""
    tree = example_tree()

    try:
        compiled = compile_tree(tree)
    except LogicTreeError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    console.print(Panel(compiled.expression, title="Tree Expression"))

    table = Table(title="Results")
    table.add_column("Milk", justify="right")
    table.add_column("Onions", justify="right")
    table.add_column("Toothpaste", justify="right")
    table.add_column("Result")
    for prices in EXAMPLE_PRICES:
        result = compiled.execute(prices)
        style = "green" if result == "true" else "red"
        table.add_row(
            str(prices["Milk"]),
            str(prices["Onions"]),
            str(prices["Toothpaste"]),
            f"[{style}]{result}[/{style}]",
        )
    console.print(table)

    console.print("\n[bold]Tree in JSON:[/bold]")
    console.print_json(to_json(tree))

    # Custom helpers are passed to the template engine by name
    milk = new_leaf("between .Milk 4 6")
    onions = new_leaf("between .Onions 1 2")
    tree2 = new_node("or", new_node("and", milk, onions), new_leaf("gt .Toothpaste 5"))
    compiled2 = compile_tree(tree2, funcs={"between": between})

    console.print(Panel(compiled2.expression, title="Tree2 Expression"))
    for prices in EXAMPLE_PRICES:
        console.print(f"  {prices} ==> {compiled2.execute(prices)}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
