"""
Template Parser.

Parses template text with ``{{ ... }}`` actions into JSON Logic style nodes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Collection, List, Optional, Tuple, Union

from ..errors import TemplateSyntaxError


LEFT_DELIM = "{{"
RIGHT_DELIM = "}}"

# Functions every template understands
BUILTINS = frozenset({
    "and", "or", "not",
    "eq", "ne", "lt", "le", "gt", "ge",
    "len", "print",
})

# Reserved for field references in parsed output
RESERVED = frozenset({"var"})

LITERALS = {
    "true": True,
    "false": False,
    "nil": None,
}

_TOKEN_PATTERN = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<lparen>\()
    | (?P<rparen>\))
    | (?P<pipe>\|)
    | (?P<string>"(?:[^"\\\n]|\\.)*"|`[^`]*`)
    | (?P<number>[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
    | (?P<field>(?:\.[A-Za-z_]\w*)+|\.)
    | (?P<ident>[A-Za-z_]\w*)
    """,
    re.VERBOSE,
)

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
}


@dataclass
class Token:
    """A lexical token inside an action."""
    kind: str
    text: str
    position: int


@dataclass
class Action:
    """A parsed ``{{ ... }}`` action."""
    logic: Any
    position: int
    source: str


Segment = Union[str, Action]


class TemplateParser:
    """
    Parser for template text.

    Converts actions like:
        "{{ and (ge .Milk 4) (le .Milk 6) }}"
        "{{ .Price | gt 5 }}"

    Into JSON Logic style nodes:
        {"and": [{"ge": [{"var": "Milk"}, 4]}, {"le": [{"var": "Milk"}, 6]}]}
        {"gt": [5, {"var": "Price"}]}
    """

    def __init__(self, functions: Optional[Collection[str]] = None):
        """
        Initialize the parser.

        Args:
            functions: Names of caller supplied helper functions.
        """
        self.functions = BUILTINS | frozenset(functions or ())

    def parse(self, text: str) -> List[Segment]:
        """
        Parse template text into literal text and actions.

        Args:
            text: The template text.

        Returns:
            Ordered list of text strings and Action objects.

        Raises:
            TemplateSyntaxError: If an action is malformed.
        """
        if not isinstance(text, str):
            raise TemplateSyntaxError(f"Expected string template, got {type(text).__name__}")

        segments: List[Segment] = []
        pos = 0

        while pos < len(text):
            start = text.find(LEFT_DELIM, pos)
            if start < 0:
                segments.append(text[pos:])
                break

            if start > pos:
                segments.append(text[pos:start])

            body_start = start + len(LEFT_DELIM)
            end = self._find_right_delim(text, body_start)
            if end < 0:
                raise TemplateSyntaxError("unclosed action", start, text)

            body = text[body_start:end]
            logic = self.parse_action(body, offset=body_start)
            segments.append(Action(logic=logic, position=start, source=body.strip()))
            pos = end + len(RIGHT_DELIM)

        return segments

    def parse_action(self, body: str, offset: int = 0) -> Any:
        """Parse the body of a single action."""
        tokens = self._tokenize(body, offset)
        if not tokens:
            raise TemplateSyntaxError("missing value for command", offset, body)

        try:
            logic, index = self._parse_pipeline(tokens, 0)
        except RecursionError:
            raise TemplateSyntaxError("expression nested too deeply", offset, body) from None
        if index < len(tokens):
            token = tokens[index]
            raise TemplateSyntaxError(f"unexpected {token.text!r} in command", token.position, body)
        return logic

    def _find_right_delim(self, text: str, pos: int) -> int:
        """Find the closing delimiter, skipping over quoted strings."""
        quote: Optional[str] = None
        i = pos

        while i < len(text):
            char = text[i]
            if quote:
                if char == "\\" and quote == '"':
                    i += 2
                    continue
                if char == quote:
                    quote = None
            elif char in ('"', "`"):
                quote = char
            elif text.startswith(RIGHT_DELIM, i):
                return i
            i += 1

        return -1

    def _tokenize(self, body: str, offset: int) -> List[Token]:
        """Split an action body into tokens."""
        tokens = []
        pos = 0

        while pos < len(body):
            match = _TOKEN_PATTERN.match(body, pos)
            if not match:
                char = body[pos]
                if char in ('"', "`"):
                    raise TemplateSyntaxError("unterminated quoted string", offset + pos, body)
                raise TemplateSyntaxError(f"unexpected character {char!r}", offset + pos, body)

            kind = match.lastgroup
            if kind != "space":
                tokens.append(Token(kind=kind, text=match.group(), position=offset + pos))
            pos = match.end()

        return tokens

    def _parse_pipeline(self, tokens: List[Token], index: int) -> Tuple[Any, int]:
        """Parse commands joined by '|', feeding each result as the last argument of the next."""
        logic, index = self._parse_command(tokens, index)

        while index < len(tokens) and tokens[index].kind == "pipe":
            pipe = tokens[index]
            index += 1
            if index >= len(tokens) or tokens[index].kind != "ident" or tokens[index].text in LITERALS:
                raise TemplateSyntaxError("pipeline must continue with a function", pipe.position)

            command, index = self._parse_command(tokens, index)
            name = next(iter(command))
            logic = {name: command[name] + [logic]}

        return logic, index

    def _parse_command(self, tokens: List[Token], index: int) -> Tuple[Any, int]:
        """Parse a function call or a single operand."""
        if index >= len(tokens):
            raise TemplateSyntaxError("missing value for command")

        first = tokens[index]
        if first.kind in ("pipe", "rparen"):
            raise TemplateSyntaxError("missing value for command", first.position)

        if first.kind == "ident" and first.text not in LITERALS:
            name = self._check_function(first)
            index += 1
            args = []
            while index < len(tokens) and tokens[index].kind not in ("pipe", "rparen"):
                arg, index = self._parse_operand(tokens, index)
                args.append(arg)
            return {name: args}, index

        value, index = self._parse_operand(tokens, index)
        if index < len(tokens) and tokens[index].kind not in ("pipe", "rparen"):
            raise TemplateSyntaxError(
                f"can't give argument to non-function {first.text}", tokens[index].position
            )
        return value, index

    def _parse_operand(self, tokens: List[Token], index: int) -> Tuple[Any, int]:
        """Parse a single operand (literal, field, function name or sub-command)."""
        token = tokens[index]

        if token.kind == "lparen":
            logic, index = self._parse_pipeline(tokens, index + 1)
            if index >= len(tokens) or tokens[index].kind != "rparen":
                raise TemplateSyntaxError("unclosed left paren", token.position)
            return logic, index + 1

        if token.kind == "field":
            return {"var": token.text[1:]}, index + 1

        if token.kind == "string":
            return self._parse_string(token), index + 1

        if token.kind == "number":
            return self._parse_number(token), index + 1

        if token.kind == "ident":
            if token.text in LITERALS:
                return LITERALS[token.text], index + 1
            # A bare function name is called without arguments
            return {self._check_function(token): []}, index + 1

        raise TemplateSyntaxError(f"unexpected {token.text!r} in operand", token.position)

    def _check_function(self, token: Token) -> str:
        if token.text not in self.functions:
            raise TemplateSyntaxError(f'function "{token.text}" not defined', token.position)
        return token.text

    def _parse_string(self, token: Token) -> str:
        """Parse a quoted string literal."""
        raw = token.text[1:-1]
        if token.text.startswith("`"):
            return raw

        result = []
        i = 0
        while i < len(raw):
            char = raw[i]
            if char == "\\":
                escaped = raw[i + 1]
                if escaped not in _ESCAPES:
                    raise TemplateSyntaxError(f"unknown escape sequence \\{escaped}", token.position)
                result.append(_ESCAPES[escaped])
                i += 2
                continue
            result.append(char)
            i += 1
        return "".join(result)

    def _parse_number(self, token: Token) -> Union[int, float]:
        """Parse an integer or float literal."""
        text = token.text
        if any(c in text for c in ".eE"):
            return float(text)
        return int(text)

    def validate(self, text: str) -> Tuple[bool, Optional[str]]:
        """
        Validate template text without keeping the parse result.

        Returns:
            Tuple of (is_valid, error_message).
        """
        try:
            self.parse(text)
            return True, None
        except TemplateSyntaxError as e:
            return False, str(e)

