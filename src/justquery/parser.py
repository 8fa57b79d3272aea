"""Markup parsing and the owning document tree.

Parsing is delegated to the standard library's ``html.parser`` tokenizer; this
module only turns its events into justquery nodes. No ``html``/``head``/``body``
wrappers are synthesized, so ``Document("<div>x</div>").document_element`` is
the ``div`` itself.
"""

from __future__ import annotations

import codecs
import logging
from html.parser import HTMLParser
from typing import TYPE_CHECKING, Any

from .constants import (
    IMPLIED_END_SCOPE,
    IMPLIED_END_TAGS,
    P_CLOSING_ELEMENTS,
    VOID_ELEMENTS,
    Options,
)
from .node import ElementNode, SimpleDomNode, TextNode

if TYPE_CHECKING:
    from .elements import Elements

logger = logging.getLogger(__name__)

_BOMS: tuple[tuple[bytes, str], ...] = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
)


class MarkupError(ValueError):
    """Raised when markup cannot be turned into the requested structure."""


def _sniff_bom(data: bytes) -> tuple[str | None, int]:
    for bom, name in _BOMS:
        if data.startswith(bom):
            return name, len(bom)
    return None, 0


def decode_html(data: bytes, transport_encoding: str | None = None) -> tuple[str, str]:
    """Decode markup bytes, returning the text and the encoding used.

    A byte order mark wins over `transport_encoding`; unknown labels and
    missing labels fall back to UTF-8. Undecodable bytes are replaced.
    """
    encoding, skip = _sniff_bom(data)
    if encoding is None:
        encoding = "utf-8"
        if transport_encoding:
            try:
                encoding = codecs.lookup(transport_encoding).name
            except LookupError:
                logger.warning("Unknown encoding %r, decoding as utf-8", transport_encoding)
    return data[skip:].decode(encoding, "replace"), encoding


def _read_source(source: Any, encoding: str | None) -> tuple[str, str | None]:
    if source is None:
        return "", None
    if hasattr(source, "read") and not isinstance(source, (str, bytes, bytearray, memoryview)):
        source = source.read()
    if isinstance(source, (bytes, bytearray, memoryview)):
        return decode_html(bytes(source), encoding)
    if isinstance(source, str):
        return source, None
    raise TypeError(f"Can't process this kind of input: {type(source).__name__}")


class TreeBuilder(HTMLParser):
    """Builds justquery nodes under `root` from ``html.parser`` events."""

    open_elements: list[Any]
    root: SimpleDomNode

    def __init__(self, root: SimpleDomNode) -> None:
        super().__init__(convert_charrefs=True)
        self.root = root
        self.open_elements = [root]

    @property
    def current(self) -> Any:
        return self.open_elements[-1]

    def _pop_to(self, index: int) -> None:
        del self.open_elements[index:]

    def _close_implied(self, tag: str) -> None:
        stack = self.open_elements
        if tag in P_CLOSING_ELEMENTS:
            for index in range(len(stack) - 1, 0, -1):
                name = stack[index].name
                if name == "p":
                    self._pop_to(index)
                    break
                if name in IMPLIED_END_SCOPE:
                    break

        closes = IMPLIED_END_TAGS.get(tag)
        if not closes:
            return
        lowest: int | None = None
        for index in range(len(stack) - 1, 0, -1):
            name = stack[index].name
            if name in closes:
                lowest = index
            elif name in IMPLIED_END_SCOPE:
                break
        if lowest is not None:
            self._pop_to(lowest)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        tag = tag.lower()
        self._close_implied(tag)
        attributes: dict[str, str] = {}
        for name, value in attrs:
            # First occurrence wins for duplicate attributes
            attributes.setdefault(name.lower(), value or "")
        node = ElementNode(tag, attributes)
        self.current.append_child(node)
        if tag not in VOID_ELEMENTS:
            self.open_elements.append(node)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        # <div/> is an empty element rather than an unclosed one.
        self.handle_starttag(tag, attrs)
        if tag.lower() not in VOID_ELEMENTS:
            self.open_elements.pop()

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        for index in range(len(self.open_elements) - 1, 0, -1):
            if self.open_elements[index].name == tag:
                self._pop_to(index)
                return
        logger.debug("Ignoring unmatched end tag </%s> at %d:%d", tag, *self.getpos())

    def handle_data(self, data: str) -> None:
        if not data:
            return
        children = self.current.children
        if children and children[-1].name == "#text":
            children[-1].data = (children[-1].data or "") + data
            return
        self.current.append_child(TextNode(data))

    def handle_comment(self, data: str) -> None:
        self.current.append_child(SimpleDomNode("#comment", data=data))

    def handle_decl(self, decl: str) -> None:
        if decl.lower().startswith("doctype"):
            self.current.append_child(SimpleDomNode("!doctype", data=decl))

    def unknown_decl(self, data: str) -> None:
        if data.startswith("CDATA["):
            self.handle_data(data[len("CDATA[") :])


class Document:
    """The tree that owns nodes: creates, imports and serializes them."""

    __slots__ = ("encoding", "root")

    encoding: str | None
    root: SimpleDomNode

    def __init__(self, html: Any = None, *, encoding: str | None = None) -> None:
        html_str, self.encoding = _read_source(html, encoding)
        self.root = SimpleDomNode("#document")
        if html_str:
            builder = TreeBuilder(self.root)
            builder.feed(html_str)
            builder.close()

    @property
    def document_element(self) -> ElementNode | None:
        """The first element child of the document, or None for a blank document."""
        for child in self.root.children or []:
            if child.is_element:
                return child
        return None

    def create_element(self, name: str, attrs: dict[str, str] | None = None) -> ElementNode:
        return ElementNode(name.lower(), attrs)

    def create_text_node(self, data: str) -> TextNode:
        return TextNode(data)

    def create_document_fragment(self) -> SimpleDomNode:
        return SimpleDomNode("#document-fragment")

    def import_node(self, node: Any, deep: bool = True) -> Any:
        """Return a copy of `node` owned by this document but not yet placed."""
        return node.clone_node(deep=deep)

    def elements(self, options: Options = Options.NONE) -> Elements:
        """Return a collection wrapping the document element."""
        from .elements import Elements

        return Elements(self.document_element, self, options)

    def to_html(self, pretty: bool = False, indent_size: int = 2) -> str:
        """Serialize the document to HTML. Delegates to root.to_html()."""
        return self.root.to_html(pretty=pretty, indent_size=indent_size)

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        """Return the document's concatenated text.

        Delegates to `root.to_text(separator=..., strip=...)`.
        """
        return self.root.to_text(separator=separator, strip=strip)


def parse_markup(html: str) -> ElementNode:
    """Parse a document and return its root element.

    Raises:
        MarkupError: If the markup contains no element
    """
    element = Document(html).document_element
    if element is None:
        raise MarkupError("Failed to load HTML content: no root element found")
    return element


def parse_fragment(html: str) -> SimpleDomNode:
    """Parse markup into a ``#document-fragment`` holding the top-level nodes.

    Raises:
        MarkupError: If the markup produces no nodes at all
    """
    fragment = SimpleDomNode("#document-fragment")
    builder = TreeBuilder(fragment)
    builder.feed(html)
    builder.close()
    if not fragment.children:
        raise MarkupError("Failed to load HTML content: markup produced no nodes")
    return fragment


def load(source: Any = None, options: Options = Options.NONE, *, encoding: str | None = None) -> Elements:
    """Load a document and return a collection wrapping its root element.

    `source` may be a string, bytes, any object with a ``read()`` method, or
    None for a blank document (which yields an empty collection).

    Raises:
        TypeError: For any other kind of source
    """
    return Document(source, encoding=encoding).elements(options)
