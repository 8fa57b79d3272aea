from .constants import Options
from .elements import UNSET, Elements
from .node import ElementNode, HierarchyError, SimpleDomNode, TextNode
from .parser import Document, MarkupError, load, parse_fragment, parse_markup
from .selector import SelectorError, matches, parse_selector
from .serialize import prettify, to_html

__version__ = "0.1.0"

__all__ = [
    "UNSET",
    "Document",
    "ElementNode",
    "Elements",
    "HierarchyError",
    "MarkupError",
    "Options",
    "SelectorError",
    "SimpleDomNode",
    "TextNode",
    "load",
    "matches",
    "parse_fragment",
    "parse_markup",
    "parse_selector",
    "prettify",
    "to_html",
]
