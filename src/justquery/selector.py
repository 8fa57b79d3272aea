# Selector engine for justquery
# Supports tag, #id, .class and [attr] predicates joined by descendant whitespace

from __future__ import annotations

from typing import Any


class SelectorError(ValueError):
    """Raised when a selector is invalid."""


# Token types for the selector lexer
class TokenType:
    TAG: str = "TAG"  # div, span, etc.
    UNIVERSAL: str = "UNIVERSAL"  # *
    ID: str = "ID"  # #foo
    CLASS: str = "CLASS"  # .bar
    ATTR_START: str = "ATTR_START"  # [
    ATTR_NAME: str = "ATTR_NAME"  # the name inside [...]
    ATTR_OP: str = "ATTR_OP"  # =, ~=, |=
    STRING: str = "STRING"  # "value" or 'value' or unquoted
    ATTR_END: str = "ATTR_END"  # ]
    COMBINATOR: str = "COMBINATOR"  # whitespace between steps
    EOF: str = "EOF"


class Token:
    __slots__ = ("type", "value")

    type: str
    value: str | None

    def __init__(self, token_type: str, value: str | None = None) -> None:
        self.type = token_type
        self.value = value

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"


class SelectorTokenizer:
    """Tokenizes a selector string into tokens."""

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < self.length:
            return self.selector[pos]
        return ""

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.selector[self.pos] in " \t\n\r\f":
            self.pos += 1

    def _is_name_start(self, ch: str) -> bool:
        # Identifier start: letter, underscore, hyphen, or non-ASCII
        return ch.isalpha() or ch == "_" or ch == "-" or ord(ch) > 127

    def _is_name_char(self, ch: str) -> bool:
        return self._is_name_start(ch) or ch.isdigit()

    def _read_name(self) -> str:
        start = self.pos
        while self.pos < self.length and self._is_name_char(self.selector[self.pos]):
            self.pos += 1
        return self.selector[start : self.pos]

    def _read_attr_name(self) -> str:
        # Attribute names may also contain ':' (xml:lang) and '.'
        start = self.pos
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if not (self._is_name_char(ch) or ch in ":."):
                break
            self.pos += 1
        return self.selector[start : self.pos]

    def _read_string(self, quote: str) -> str:
        # Skip opening quote
        self.pos += 1
        start = self.pos
        parts: list[str] = []

        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == quote:
                if self.pos > start:
                    parts.append(self.selector[start : self.pos])
                self.pos += 1
                return "".join(parts)
            if ch == "\\":
                if self.pos > start:
                    parts.append(self.selector[start : self.pos])
                self.pos += 1
                if self.pos < self.length:
                    parts.append(self.selector[self.pos])
                    self.pos += 1
                start = self.pos
            else:
                self.pos += 1

        raise SelectorError(f"Unterminated string in selector: {self.selector!r}")

    def _read_unquoted_attr_value(self) -> str:
        start = self.pos
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch in " \t\n\r\f]":
                break
            self.pos += 1
        return self.selector[start : self.pos]

    def _tokenize_attribute(self, tokens: list[Token]) -> None:
        self.pos += 1
        tokens.append(Token(TokenType.ATTR_START))
        self._skip_whitespace()

        attr_name = self._read_attr_name()
        if not attr_name:
            raise SelectorError(f"Expected attribute name at position {self.pos}")
        tokens.append(Token(TokenType.ATTR_NAME, attr_name.lower()))
        self._skip_whitespace()

        ch = self._peek()
        if ch == "]":
            self.pos += 1
            tokens.append(Token(TokenType.ATTR_END))
            return

        if ch == "=":
            self.pos += 1
            tokens.append(Token(TokenType.ATTR_OP, "="))
        elif ch in ("~", "|") and self._peek(1) == "=":
            self.pos += 2
            tokens.append(Token(TokenType.ATTR_OP, ch + "="))
        elif ch:
            raise SelectorError(f"Unsupported attribute operator at position {self.pos}: {ch!r}")
        else:
            raise SelectorError(f"Expected ] at position {self.pos}")

        self._skip_whitespace()
        ch = self._peek()
        if ch == '"' or ch == "'":
            value = self._read_string(ch)
        else:
            value = self._read_unquoted_attr_value()
        tokens.append(Token(TokenType.STRING, value))

        self._skip_whitespace()
        if self._peek() != "]":
            raise SelectorError(f"Expected ] at position {self.pos}")
        self.pos += 1
        tokens.append(Token(TokenType.ATTR_END))

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        pending_whitespace = False

        while self.pos < self.length:
            ch = self.selector[self.pos]

            # Skip whitespace but remember it as a step boundary
            if ch in " \t\n\r\f":
                pending_whitespace = True
                self._skip_whitespace()
                continue

            if pending_whitespace and tokens:
                tokens.append(Token(TokenType.COMBINATOR, " "))
            pending_whitespace = False

            if ch == "*":
                self.pos += 1
                tokens.append(Token(TokenType.UNIVERSAL))
                continue

            if ch == "#":
                self.pos += 1
                name = self._read_name()
                if not name:
                    raise SelectorError(f"Expected identifier after # at position {self.pos}")
                tokens.append(Token(TokenType.ID, name))
                continue

            if ch == ".":
                self.pos += 1
                name = self._read_name()
                if not name:
                    raise SelectorError(f"Expected identifier after . at position {self.pos}")
                tokens.append(Token(TokenType.CLASS, name))
                continue

            if ch == "[":
                self._tokenize_attribute(tokens)
                continue

            if self._is_name_char(ch):
                name = self._read_name()
                tokens.append(Token(TokenType.TAG, name.lower()))  # Tags are case-insensitive
                continue

            if ch in ">+~,:":
                raise SelectorError(f"Unsupported selector syntax {ch!r} at position {self.pos}")

            raise SelectorError(f"Unexpected character {ch!r} at position {self.pos}")

        tokens.append(Token(TokenType.EOF))
        return tokens


class AttributePredicate:
    """One ``[name]`` / ``[name=value]`` / ``[name~=value]`` / ``[name|=value]`` test."""

    __slots__ = ("name", "operator", "value")

    name: str
    operator: str | None
    value: str | None

    def __init__(self, name: str, operator: str | None = None, value: str | None = None) -> None:
        self.name = name
        self.operator = operator
        self.value = value

    def __repr__(self) -> str:
        if self.operator is None:
            return f"AttributePredicate({self.name!r})"
        return f"AttributePredicate({self.name!r}, {self.operator!r}, {self.value!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttributePredicate):
            return NotImplemented
        return (self.name, self.operator, self.value) == (other.name, other.operator, other.value)

    __hash__ = None  # type: ignore[assignment]


class SelectorStep:
    """One whitespace-delimited unit of a selector (e.g. ``div#main.a.b[title]``)."""

    __slots__ = ("attributes", "classes", "id", "tag")

    tag: str
    id: str | None
    classes: list[str]
    attributes: list[AttributePredicate]

    def __init__(
        self,
        tag: str = "",
        id: str | None = None,  # noqa: A002
        classes: list[str] | None = None,
        attributes: list[AttributePredicate] | None = None,
    ) -> None:
        self.tag = tag
        self.id = id
        self.classes = classes or []
        self.attributes = attributes or []

    def __repr__(self) -> str:
        parts = [f"SelectorStep({self.tag!r}"]
        if self.id is not None:
            parts.append(f", id={self.id!r}")
        if self.classes:
            parts.append(f", classes={self.classes!r}")
        if self.attributes:
            parts.append(f", attributes={self.attributes!r}")
        parts.append(")")
        return "".join(parts)


class SelectorParser:
    """Parses a list of tokens into selector steps."""

    __slots__ = ("pos", "tokens")

    tokens: list[Token]
    pos: int

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token(TokenType.EOF)

    def _advance(self) -> Token:
        token = self._peek()
        self.pos += 1
        return token

    def _expect(self, token_type: str) -> Token:
        token = self._peek()
        if token.type != token_type:
            raise SelectorError(f"Expected {token_type}, got {token.type}")
        return self._advance()

    def parse(self) -> list[SelectorStep]:
        steps: list[SelectorStep] = []
        while self._peek().type != TokenType.EOF:
            steps.append(self._parse_step())
            if self._peek().type == TokenType.COMBINATOR:
                self._advance()
        return steps

    def _parse_step(self) -> SelectorStep:
        step = SelectorStep()

        token = self._peek()
        if token.type == TokenType.TAG:
            step.tag = token.value or ""
            self._advance()
        elif token.type == TokenType.UNIVERSAL:
            self._advance()

        while True:
            token = self._peek()

            if token.type == TokenType.ID:
                self._advance()
                if step.id is not None and step.id != token.value:
                    raise SelectorError(f"Conflicting ids in selector step: #{step.id} and #{token.value}")
                step.id = token.value

            elif token.type == TokenType.CLASS:
                self._advance()
                if token.value not in step.classes:
                    step.classes.append(token.value or "")

            elif token.type == TokenType.ATTR_START:
                step.attributes.append(self._parse_attribute())

            elif token.type in (TokenType.TAG, TokenType.UNIVERSAL):
                raise SelectorError(f"Type selector must come first in a step, got {token}")

            else:
                break

        return step

    def _parse_attribute(self) -> AttributePredicate:
        self._expect(TokenType.ATTR_START)
        name = self._expect(TokenType.ATTR_NAME).value or ""

        if self._peek().type == TokenType.ATTR_END:
            self._advance()
            return AttributePredicate(name)

        operator = self._expect(TokenType.ATTR_OP).value
        value = self._expect(TokenType.STRING).value
        self._expect(TokenType.ATTR_END)
        return AttributePredicate(name, operator, value)


class SelectorMatcher:
    """Matches selector steps against DOM nodes."""

    __slots__ = ()

    def matches_step(self, node: Any, step: SelectorStep) -> bool:
        """Check a node against one step, cheapest discriminator first."""
        # Text nodes and other non-element nodes never match
        if not node.is_element:
            return False

        if step.tag and node.name.lower() != step.tag:
            return False

        attrs = node.attrs or {}

        if step.id is not None and attrs.get("id") != step.id:
            return False

        if step.classes and not self._has_classes(attrs.get("class"), step.classes):
            return False

        return all(self._matches_attribute(attrs, predicate) for predicate in step.attributes)

    def _has_classes(self, class_attr: str | None, required: list[str]) -> bool:
        if not class_attr:
            return False
        return set(class_attr.split()).issuperset(required)

    def _matches_attribute(self, attrs: dict[str, str], predicate: AttributePredicate) -> bool:
        # Attribute names are case-insensitive in HTML
        attr_value: str | None = None
        for name, value in attrs.items():
            if name.lower() == predicate.name:
                attr_value = value if value is not None else ""
                break

        if attr_value is None:
            return False

        # Presence check only
        if predicate.operator is None:
            return True

        value = predicate.value or ""
        op = predicate.operator

        if op == "=":
            return attr_value == value

        if op == "~=":
            # Space-separated word match
            return value in attr_value.split()

        # op == "|=": hyphen-separated prefix match (lang|="en" matches "en-US")
        return attr_value == value or attr_value.startswith(value + "-")


def parse_selector(selector_string: str) -> list[SelectorStep]:
    """Parse a selector string into steps. An empty selector yields no steps."""
    if not selector_string or not selector_string.strip():
        return []

    tokenizer = SelectorTokenizer(selector_string.strip())
    tokens = tokenizer.tokenize()
    parser = SelectorParser(tokens)
    return parser.parse()


# Global matcher instance
_matcher: SelectorMatcher = SelectorMatcher()


def _heap(working: list[Any], step: SelectorStep) -> list[Any]:
    heap: list[Any] = []
    tag = step.tag or "*"
    for node in working:
        heap.extend(node.get_elements_by_tag_name(tag))
    return heap


def select(nodes: list[Any], selector_string: str, match_self: bool = False) -> list[Any]:
    """
    Narrow `nodes` by a selector, one step at a time, left to right.

    Each step collects every descendant element of the working set (or, with
    `match_self`, the working set itself) and keeps the ones the step matches.
    Descendants of several working nodes are concatenated in working-set order,
    so nested working nodes can contribute the same element twice.

    Args:
        nodes: The starting working set
        selector_string: A selector string; empty selects nothing
        match_self: Test the working set itself instead of descending

    Returns:
        A list of matching nodes

    Raises:
        SelectorError: If the selector is invalid
    """
    steps = parse_selector(selector_string)
    if not steps:
        return []

    working = list(nodes)
    for step in steps:
        heap = working if match_self else _heap(working, step)
        working = [node for node in heap if _matcher.matches_step(node, step)]
        if not working:
            break
    return working


def matches(node: Any, selector_string: str) -> bool:
    """
    Check if a node matches every step of a selector when tested in place.

    Returns:
        True if the node matches, False otherwise
    """
    return bool(select([node], selector_string, match_self=True))
