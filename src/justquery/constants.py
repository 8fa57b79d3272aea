from __future__ import annotations

import enum


class Options(enum.IntFlag):
    """Per-collection behaviour flags, inherited by every derived collection."""

    NONE = 0
    # children() also returns text nodes.
    INCLUDE_TEXT_NODES = 1
    # get_html() skips the prettify() pass.
    SKIP_PRETTY_PRINT = 2
    # append() parses string content as markup.
    UNSAFE_HTML = 128


VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements whose start tag closes an open <p>.
P_CLOSING_ELEMENTS: frozenset[str] = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "div",
        "dl",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    }
)

# Start tag -> open siblings it implicitly closes.
IMPLIED_END_TAGS: dict[str, frozenset[str]] = {
    "li": frozenset({"li"}),
    "dt": frozenset({"dt", "dd"}),
    "dd": frozenset({"dt", "dd"}),
    "option": frozenset({"option"}),
    "tr": frozenset({"tr", "td", "th"}),
    "td": frozenset({"td", "th"}),
    "th": frozenset({"td", "th"}),
}

# Implied-end scanning stops at these so a nested list never closes its parent item.
IMPLIED_END_SCOPE: frozenset[str] = frozenset({"ul", "ol", "dl", "table", "select", "tbody", "thead", "tfoot"})

# Text inside these is never reformatted by prettify().
PREFORMATTED_ELEMENTS: frozenset[str] = frozenset({"pre", "textarea", "script", "style"})

# Text children of these are serialized without escaping.
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset({"script", "style"})
