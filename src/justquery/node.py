from __future__ import annotations

from typing import Any

from .serialize import to_html


class HierarchyError(ValueError):
    """Raised when a tree mutation would break the parent/child structure."""


# Type alias for any node type
NodeType = "SimpleDomNode | ElementNode | TextNode"


def _to_text_collect(node: Any, parts: list[str], strip: bool) -> None:
    name: str = node.name

    if name == "#text":
        data: str | None = node.data
        if not data:
            return
        if strip:
            data = data.strip()
            if not data:
                return
        parts.append(data)
        return

    if node.children:
        for child in node.children:
            _to_text_collect(child, parts, strip=strip)


def _collect_elements(node: Any, name: str, out: list[Any]) -> None:
    for child in node.children:
        if child.name.startswith("#") or child.name == "!doctype":
            if child.children:
                _collect_elements(child, name, out)
            continue
        if name == "*" or child.name == name:
            out.append(child)
        _collect_elements(child, name, out)


class SimpleDomNode:
    __slots__ = ("attrs", "children", "data", "name", "parent")

    name: str
    parent: SimpleDomNode | ElementNode | None
    attrs: dict[str, str] | None
    children: list[Any] | None
    data: str | None

    def __init__(
        self,
        name: str,
        attrs: dict[str, str] | None = None,
        data: str | None = None,
    ) -> None:
        self.name = name
        self.parent = None
        self.data = data

        if name == "#comment" or name == "!doctype":
            self.children = None
            self.attrs = None
        else:
            self.children = []
            self.attrs = attrs if attrs is not None else {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    @property
    def is_element(self) -> bool:
        return not (self.name.startswith("#") or self.name == "!doctype")

    def append_child(self, node: Any) -> None:
        if self.children is None:
            raise HierarchyError(f"Node {self.name} cannot have children")
        if node.parent is not None:
            node.parent.remove_child(node)
        self.children.append(node)
        node.parent = self

    def remove_child(self, node: Any) -> None:
        if self.children is None or not any(child is node for child in self.children):
            raise HierarchyError("The node to be removed is not a child of this node")
        # list.remove() compares with ==, which is identity for nodes
        self.children.remove(node)
        node.parent = None

    def to_html(self, pretty: bool = False, indent_size: int = 2) -> str:
        """Convert node to HTML string."""
        return to_html(self, indent_size=indent_size, pretty=pretty)

    @property
    def text(self) -> str:
        """Return the node's own text value.

        For text nodes this is the node data. For other nodes this is an empty
        string. Use `text_content` or `to_text()` for the text of descendants.
        """
        return ""

    @property
    def text_content(self) -> str:
        """The DOM ``textContent``: every descendant text node, unstripped."""
        if self.children is None:
            return self.data or ""
        return self.to_text(separator="", strip=False)

    @text_content.setter
    def text_content(self, value: str) -> None:
        if self.children is None:
            self.data = value
            return
        for child in self.children:
            child.parent = None
        self.children = []
        if value:
            self.append_child(TextNode(value))

    def to_text(self, separator: str = " ", strip: bool = True) -> str:
        """Return the concatenated text of this node's descendants.

        - `separator` controls how text nodes are joined (default: a single space).
        - `strip=True` strips each text node and drops empty segments.
        """
        parts: list[str] = []
        _to_text_collect(self, parts, strip=strip)
        if not parts:
            return ""
        return separator.join(parts)

    def insert_before(self, node: Any, reference_node: Any | None) -> None:
        """
        Insert a node before a reference node.

        Args:
            node: The node to insert
            reference_node: The node to insert before. If None, append to end.

        Raises:
            HierarchyError: If reference_node is not a child of this node
        """
        if self.children is None:
            raise HierarchyError(f"Node {self.name} cannot have children")

        if reference_node is None:
            self.append_child(node)
            return

        for index, child in enumerate(self.children):
            if child is reference_node:
                break
        else:
            raise HierarchyError("Reference node is not a child of this node")

        if node.parent is not None:
            node.parent.remove_child(node)
            index = self.children.index(reference_node)
        self.children.insert(index, node)
        node.parent = self

    def replace_child(self, new_node: Any, old_node: Any) -> Any:
        """
        Replace a child node with a new node.

        Returns:
            The replaced node (old_node)

        Raises:
            HierarchyError: If old_node is not a child of this node
        """
        if self.children is None:
            raise HierarchyError(f"Node {self.name} cannot have children")

        self.insert_before(new_node, old_node)
        self.remove_child(old_node)
        return old_node

    def has_child_nodes(self) -> bool:
        """Return True if this node has children."""
        return bool(self.children)

    def is_same_node(self, other: Any) -> bool:
        return self is other

    def get_elements_by_tag_name(self, name: str) -> list[Any]:
        """Return every descendant element named `name` in document order.

        `"*"` matches all elements. The node itself is never included.
        """
        out: list[Any] = []
        if self.children:
            _collect_elements(self, name.lower(), out)
        return out

    def has_attribute(self, name: str) -> bool:
        return bool(self.attrs) and name in self.attrs

    def get_attribute(self, name: str) -> str | None:
        if not self.attrs:
            return None
        return self.attrs.get(name)

    def set_attribute(self, name: str, value: str) -> None:
        if self.attrs is None:
            raise HierarchyError(f"Node {self.name} cannot have attributes")
        self.attrs[name] = value

    def remove_attribute(self, name: str) -> None:
        if self.attrs:
            self.attrs.pop(name, None)

    def clone_node(self, deep: bool = False) -> SimpleDomNode:
        """
        Clone this node.

        Args:
            deep: If True, recursively clone children.

        Returns:
            A new node that is a copy of this node.
        """
        clone = SimpleDomNode(
            self.name,
            self.attrs.copy() if self.attrs else None,
            self.data,
        )
        if deep and self.children:
            for child in self.children:
                clone.append_child(child.clone_node(deep=True))
        return clone


class ElementNode(SimpleDomNode):
    __slots__ = ()

    children: list[Any]
    attrs: dict[str, str]

    def __init__(self, name: str, attrs: dict[str, str] | None = None) -> None:
        self.name = name
        self.parent = None
        self.data = None
        self.children = []
        self.attrs = attrs if attrs is not None else {}

    @property
    def is_element(self) -> bool:
        return True

    def clone_node(self, deep: bool = False) -> ElementNode:
        clone = ElementNode(self.name, self.attrs.copy())
        if deep:
            for child in self.children:
                clone.append_child(child.clone_node(deep=True))
        return clone


class TextNode:
    __slots__ = ("data", "name", "parent")

    data: str | None
    name: str
    parent: SimpleDomNode | ElementNode | None

    def __init__(self, data: str | None) -> None:
        self.data = data
        self.parent = None
        self.name = "#text"

    def __repr__(self) -> str:
        return f"<TextNode {self.data!r}>"

    @property
    def is_element(self) -> bool:
        return False

    @property
    def attrs(self) -> None:
        return None

    @property
    def text(self) -> str:
        """Return the text content of this node."""
        return self.data or ""

    @property
    def text_content(self) -> str:
        return self.data or ""

    @text_content.setter
    def text_content(self, value: str) -> None:
        self.data = value

    def to_text(self, separator: str = " ", strip: bool = True) -> str:  # noqa: ARG002
        # Parameters are accepted for API consistency; they don't affect leaf nodes.
        if self.data is None:
            return ""
        if strip:
            return self.data.strip()
        return self.data

    def to_html(self, pretty: bool = False, indent_size: int = 2) -> str:
        return to_html(self, indent_size=indent_size, pretty=pretty)

    @property
    def children(self) -> list[Any]:
        """Return empty list for TextNode (leaf node)."""
        return []

    def has_child_nodes(self) -> bool:
        """Return False for TextNode."""
        return False

    def append_child(self, node: Any) -> None:  # noqa: ARG002
        raise HierarchyError("Text nodes cannot have children")

    def is_same_node(self, other: Any) -> bool:
        return self is other

    def get_elements_by_tag_name(self, name: str) -> list[Any]:  # noqa: ARG002
        return []

    def has_attribute(self, name: str) -> bool:  # noqa: ARG002
        return False

    def get_attribute(self, name: str) -> None:  # noqa: ARG002
        return None

    def set_attribute(self, name: str, value: str) -> None:  # noqa: ARG002
        raise HierarchyError("Text nodes cannot have attributes")

    def remove_attribute(self, name: str) -> None:
        pass

    def clone_node(self, deep: bool = False) -> TextNode:  # noqa: ARG002
        return TextNode(self.data)
