"""The element collection: zero or more tree nodes handled as one value.

Read accessors collapse their per-member results: an empty collection gives
``None``, a single member gives that member's value, and several members give
a list of values in member order. Setters apply to every member and return the
collection itself so calls can be chained::

    doc = load("<ul><li>a</li><li class='x'>b</li></ul>")
    doc.select("li").add_class("item").attribute("role", "listitem")
    doc.select("li.x").text()      # "b"
    doc.select("li").text()        # ["a", "b"]
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from .constants import Options
from .node import HierarchyError, SimpleDomNode, TextNode
from .parser import Document, MarkupError, parse_fragment
from .selector import select
from .serialize import prettify, to_html

logger = logging.getLogger(__name__)

_NODE_TYPES = (SimpleDomNode, TextNode)


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<unset>"


# Marks "no value given" so that None can still be a real argument.
UNSET: Any = _Unset()


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


class Elements:
    __slots__ = ("_nodes", "document", "options")

    _nodes: list[Any]
    document: Document
    options: Options

    def __init__(
        self,
        elements: Any = None,
        document: Document | None = None,
        options: Options | int = Options.NONE,
    ) -> None:
        self.document = document if document is not None else Document()
        self.options = Options(options)
        if elements is None:
            self._nodes = []
        elif isinstance(elements, _NODE_TYPES):
            self._nodes = [elements]
        elif isinstance(elements, Elements):
            self._nodes = list(elements._nodes)
        elif isinstance(elements, (list, tuple)):
            for node in elements:
                if not isinstance(node, _NODE_TYPES):
                    raise TypeError(f"Not a node: {type(node).__name__}")
            self._nodes = list(elements)
        else:
            raise TypeError(f"Not a node or list of nodes: {type(elements).__name__}")

    def _derive(self, nodes: Any) -> Elements:
        return Elements(nodes, self.document, self.options)

    def _for_all_do(self, function: Callable[..., Any], *args: Any) -> Elements:
        # Iterate a snapshot; the first failure stops the remaining members.
        for node in list(self._nodes):
            function(node, *args)
        return self

    def _for_all_get(self, function: Callable[..., Any], *args: Any) -> Any:
        if not self._nodes:
            return None
        values = [function(node, *args) for node in self._nodes]
        return values[0] if len(values) == 1 else values

    # Sequence protocol

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Elements]:
        for node in list(self._nodes):
            yield self._derive(node)

    def __getitem__(self, index: int) -> Elements:
        return self.element(index)

    def __setitem__(self, index: int, element: Any) -> None:
        if not isinstance(element, _NODE_TYPES):
            raise TypeError(f"Not a node: {type(element).__name__}")
        # TODO: define how a replacement is spliced into the document in place of the old node.
        raise NotImplementedError("Replacing an element in place is not implemented")

    def __delitem__(self, index: int) -> None:
        node = self._nodes[index]
        if node.parent is None:
            raise HierarchyError(f"Cannot delete {node!r}: it has no parent")
        node.parent.remove_child(node)
        del self._nodes[index]

    def __str__(self) -> str:
        return self.get_html()

    def __repr__(self) -> str:
        return f"Elements({self._nodes!r})"

    def copy(self) -> Elements:
        """Return a new collection over the same nodes."""
        return self._derive(self._nodes)

    def element(self, index: int) -> Elements:
        """Return the member at `index` as a one-element collection.

        Negative indexes count from the end. Out of range indexes give an
        empty collection instead of raising.
        """
        try:
            node = self._nodes[index]
        except IndexError:
            return self._derive(None)
        return self._derive(node)

    def elements(self) -> list[Any]:
        """Return the member nodes as a plain list."""
        return list(self._nodes)

    # Structure

    def select(self, selector: str, match_self: bool = False) -> Elements:
        """Return the members or their descendants matching `selector`.

        With `match_self` the members themselves are tested instead of their
        descendants.
        """
        return self._derive(select(self._nodes, selector, match_self=match_self))

    def children(self, include_text: bool = False) -> Elements:
        """Return the direct children of every member, in member order."""
        include_text = include_text or bool(self.options & Options.INCLUDE_TEXT_NODES)
        children: list[Any] = []
        for node in self._nodes:
            for child in node.children or []:
                if child.is_element or (include_text and child.name == "#text"):
                    children.append(child)
        return self._derive(children)

    def parent(self) -> Elements:
        """Return the nearest element ancestor of every member, without duplicates."""
        parents: list[Any] = []
        for node in self._nodes:
            ancestor = node.parent
            while ancestor is not None and not ancestor.is_element:
                ancestor = ancestor.parent
            if ancestor is None:
                continue
            if not any(ancestor.is_same_node(seen) for seen in parents):
                parents.append(ancestor)
        return self._derive(parents)

    def delete(self) -> Elements:
        """Remove every member from the document, then empty the collection.

        Raises:
            HierarchyError: If a member has no parent; later members are left alone
        """
        detached: set[int] = set()

        def _detach(node: Any) -> None:
            # A node listed twice is only detached once
            if id(node) in detached:
                return
            detached.add(id(node))
            if node.parent is None:
                raise HierarchyError(f"Cannot delete {node!r}: it has no parent")
            node.parent.remove_child(node)

        self._for_all_do(_detach)
        self._nodes = []
        return self

    def append(self, content: Any, unsafe: bool = False) -> Elements:
        """Append a private copy of `content` to every member.

        `content` is another collection (deep copied) or a string. Strings are
        inserted as literal text unless `unsafe` is set, or the collection has
        the ``UNSAFE_HTML`` option, in which case they are parsed as markup.

        Raises:
            TypeError: For any other content type
            MarkupError: If unsafe markup produces no nodes
        """
        new_nodes: list[Any]
        if isinstance(content, Elements):
            new_nodes = [self.document.import_node(node, deep=True) for node in content._nodes]
        elif isinstance(content, str):
            if unsafe or self.options & Options.UNSAFE_HTML:
                fragment = parse_fragment(content)
                new_nodes = [self.document.import_node(node, deep=True) for node in fragment.children]
            else:
                new_nodes = [self.document.create_text_node(content)]
        else:
            raise TypeError(f"Unhandled parameter type: {type(content).__name__}")

        for new_node in new_nodes:
            self._for_all_do(lambda node, new: node.append_child(new.clone_node(deep=True)), new_node)
        return self

    # Content

    def get_html(self) -> str:
        """Serialize the collection as one fragment.

        Unless the collection has the ``SKIP_PRETTY_PRINT`` option the fragment
        goes through `prettify`, which indents the tree as built; if that fails
        the unformatted markup is returned and a warning is logged.
        """
        fragment = self.document.create_document_fragment()
        for node in self._nodes:
            fragment.append_child(self.document.import_node(node, deep=True))
        html = to_html(fragment)
        if not html or self.options & Options.SKIP_PRETTY_PRINT:
            return html
        try:
            return prettify(fragment)
        except MarkupError as exc:
            logger.warning("Pretty-printing failed, returning unformatted HTML: %s", exc)
            return html

    def text(self) -> Any:
        """Return the full text content of every member."""
        return self._for_all_get(lambda node: node.text_content)

    def value(self, value: Any = UNSET) -> Any:
        """Get or set the text content of every member.

        Values are stored as literal text; markup characters are not parsed.
        """
        if value is UNSET:
            return self._for_all_get(lambda node: node.text_content)

        def _set(node: Any, text: str) -> None:
            node.text_content = text

        return self._for_all_do(_set, _as_text(value))

    def content(self, value: Any = UNSET) -> Any:
        """Alias for `value`.

        Setting the content escapes it: ``content("<b>")`` serializes as
        ``&lt;b&gt;``. Use ``append(markup, unsafe=True)`` to insert markup.
        """
        return self.value(value)

    # Attributes

    def id(self) -> Any:
        return self._for_all_get(lambda node: node.get_attribute("id") or "")

    def tag(self) -> Any:
        return self._for_all_get(lambda node: node.name.lower() if node.is_element else "")

    def attribute(self, name: str, value: Any = UNSET) -> Any:
        """Get or set an attribute on every member.

        Getting returns False, not None, for members without the attribute.
        """
        if value is UNSET:

            def _get(node: Any) -> str | bool:
                attr = node.get_attribute(name)
                return False if attr is None else attr

            return self._for_all_get(_get)
        return self._for_all_do(lambda node: node.set_attribute(name, _as_text(value)))

    def delete_attribute(self, name: str) -> Elements:
        return self._for_all_do(lambda node: node.remove_attribute(name))

    def classname(self, value: Any = UNSET) -> Any:
        """Get or set the raw ``class`` attribute of every member."""
        if value is UNSET:
            return self._for_all_get(lambda node: node.get_attribute("class") or "")
        return self._for_all_do(lambda node: node.set_attribute("class", _as_text(value)))

    def classnames(self, value: Any = UNSET) -> Any:
        """Get or set the ``class`` attribute of every member as a list of tokens.

        A string value is split on whitespace.
        """
        if value is UNSET:
            return self._for_all_get(lambda node: (node.get_attribute("class") or "").split())
        joined = " ".join(value.split() if isinstance(value, str) else value)
        return self._for_all_do(lambda node: node.set_attribute("class", joined))

    def add_class(self, names: str | list[str]) -> Elements:
        """Add one or more class names to every member, skipping ones already present."""
        new_classes = names.split() if isinstance(names, str) else list(names)

        def _add(node: Any) -> None:
            classes = list(dict.fromkeys((node.get_attribute("class") or "").split()))
            for name in new_classes:
                if name not in classes:
                    classes.append(name)
            node.set_attribute("class", " ".join(classes))

        return self._for_all_do(_add)

