"""HTML serialization utilities for justquery DOM nodes."""

from __future__ import annotations

# ruff: noqa: PERF401

import re
from typing import Any

from .constants import PREFORMATTED_ELEMENTS, RAW_TEXT_ELEMENTS, VOID_ELEMENTS


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _choose_attr_quote(value: str | None) -> str:
    if value is None:
        return '"'
    value = str(value)
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str | None, quote_char: str) -> str:
    if value is None:
        return ""
    value = str(value)
    value = value.replace("&", "&amp;")
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&#39;")


def serialize_start_tag(name: str, attrs: dict[str, str] | None) -> str:
    attrs = attrs or {}
    parts: list[str] = ["<", name]
    for key, value in attrs.items():
        if value is None or value == "":
            parts.extend([" ", key])
        else:
            quote = _choose_attr_quote(value)
            escaped = _escape_attr_value(value, quote)
            parts.extend([" ", key, "=", quote, escaped, quote])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def to_html(node: Any, indent: int = 0, indent_size: int = 2, *, pretty: bool = False) -> str:
    """Convert node to HTML string.

    Container nodes (``#document``, ``#document-fragment``) render only their
    children. With ``pretty=True`` every element starts on its own line and
    whitespace-only text is dropped, except inside preformatted elements.
    """
    if node.name in ("#document", "#document-fragment"):
        parts: list[str] = []
        for child in node.children or []:
            child_html = _node_to_html(child, indent, indent_size, pretty)
            if child_html:
                parts.append(child_html)
        return "\n".join(parts) if pretty else "".join(parts)
    return _node_to_html(node, indent, indent_size, pretty)


_RAW_TEXT_END = re.compile(r"</(?=script|style)", re.IGNORECASE)


def _raw_children(node: Any) -> str:
    # A literal "</script" would end the element early when reparsed.
    text = "".join(child.data or "" for child in node.children if child.name == "#text")
    return _RAW_TEXT_END.sub(r"<\\/", text)


def _node_to_html(node: Any, indent: int = 0, indent_size: int = 2, pretty: bool = False) -> str:
    """Helper to convert a node to HTML."""
    prefix = " " * (indent * indent_size) if pretty else ""
    newline = "\n" if pretty else ""
    name: str = node.name

    # Text node
    if name == "#text":
        text: str | None = node.data
        if pretty:
            text = text.strip() if text else ""
            if text:
                return f"{prefix}{_escape_text(text)}"
            return ""
        return _escape_text(text)

    if name == "#comment":
        return f"{prefix}<!--{node.data or ''}-->"

    if name == "!doctype":
        return f"{prefix}<!{node.data or 'DOCTYPE html'}>"

    if name in ("#document", "#document-fragment"):
        return to_html(node, indent, indent_size, pretty=pretty)

    # Element node
    open_tag = serialize_start_tag(name, node.attrs)

    if name in VOID_ELEMENTS:
        return f"{prefix}{open_tag}"

    children: list[Any] = node.children or []
    if not children:
        return f"{prefix}{open_tag}{serialize_end_tag(name)}"

    if name in RAW_TEXT_ELEMENTS:
        return f"{prefix}{open_tag}{_raw_children(node)}{serialize_end_tag(name)}"

    if not pretty:
        inner = "".join(_node_to_html(child, 0, indent_size, False) for child in children)
        return f"{open_tag}{inner}{serialize_end_tag(name)}"

    if name in PREFORMATTED_ELEMENTS:
        inner = "".join(_node_to_html(child, 0, indent_size, False) for child in children)
        return f"{prefix}{open_tag}{inner}{serialize_end_tag(name)}"

    # Text-only children render inline
    if all(c.name == "#text" for c in children):
        return f"{prefix}{open_tag}{_escape_text(node.to_text(separator='', strip=False).strip())}{serialize_end_tag(name)}"

    parts = [f"{prefix}{open_tag}"]
    for child in children:
        child_html = _node_to_html(child, indent + 1, indent_size, pretty)
        if child_html:
            parts.append(child_html)
    parts.append(f"{prefix}{serialize_end_tag(name)}")
    return newline.join(parts)


def prettify(markup: Any, indent_size: int = 2) -> str:
    """Reformat markup with one element per line.

    A node is rendered as it stands. A string is reparsed as a fragment first,
    so anything the parser would change (implied end tags, dropped stray end
    tags, lowercased names) is changed here too.

    Raises:
        MarkupError: If string markup yields no nodes at all
    """
    if isinstance(markup, str):
        from .parser import parse_fragment

        markup = parse_fragment(markup)
    return to_html(markup, indent_size=indent_size, pretty=True)
