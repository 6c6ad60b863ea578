"""Turn a rendered document into bounded, normalized text."""

from __future__ import annotations

import re
from typing import Iterable, List

from bs4 import BeautifulSoup
from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

HEADER_RULE = "=" * 26
CONSOLE_RULE = "=" * 50
TRUNCATION_NOTICE = "\n\n... (output truncated after {budget} chars, full content was {length} chars)"

_SKIP_TAGS = {
    "head",
    "script",
    "style",
    "noscript",
    "template",
    "svg",
    "iframe",
    "object",
    "canvas",
    "input",
    "select",
    "textarea",
    "img",
}
_BLOCK_TAGS = {
    "address",
    "article",
    "aside",
    "blockquote",
    "details",
    "dd",
    "div",
    "dl",
    "dt",
    "fieldset",
    "figcaption",
    "figure",
    "footer",
    "form",
    "header",
    "main",
    "nav",
    "p",
    "section",
    "summary",
    "table",
}
_HEADINGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
_IGNORED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

_WHITESPACE = re.compile(r"\s+")
_INNER_SPACES = re.compile(r"(?<=\S)[ \t]{2,}")
_STRAY_INDENT = re.compile(r"^[ \t]+(?![ \t]|(?:[*-]|\d+\.) )")
_BLANK_RUN = re.compile(r"\n{3,}")
_BULLET = re.compile(r"^([ \t]*)[*-] ", re.MULTILINE)

# Marks lines of a <pre> block so the line cleanup leaves them untouched.
_PRE_LINE = "\x02"


def html_to_text(html: str) -> str:
    """Convert HTML into Markdown-flavoured plain text.

    Headings become ``#`` lines, list items ``*`` bullets, links
    ``[text](href)`` and table rows ``| a | b |``.  Scripts, styles, form
    controls and the document head are dropped; ``pre`` blocks keep their
    whitespace.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    root = soup.body or soup
    rendered = _render(root, 0)
    lines: List[str] = []
    for line in rendered.split("\n"):
        if line.startswith(_PRE_LINE):
            lines.append(line.replace(_PRE_LINE, "").rstrip())
            continue
        line = _STRAY_INDENT.sub("", line.replace(_PRE_LINE, "").rstrip())
        lines.append(_INNER_SPACES.sub(" ", line))
    return "\n".join(lines).strip()


def normalize_text(text: str) -> str:
    """Collapse blank-line runs, unify bullets to ``- `` and trim.

    Applying it twice gives the same result as applying it once.
    """
    unified = text.replace("\r\n", "\n").replace("\r", "\n")
    unified = "\n".join(line.rstrip() for line in unified.split("\n"))
    unified = _BLANK_RUN.sub("\n\n", unified)
    unified = _BULLET.sub(r"\1- ", unified)
    return unified.strip()


def truncate_text(text: str, budget: int) -> str:
    if len(text) <= budget:
        return text
    return text[:budget] + TRUNCATION_NOTICE.format(budget=budget, length=len(text))


def format_output(url: str, text: str, console_lines: Iterable[str] = ()) -> str:
    """Assemble the URL header, the page text and the console section."""
    result = f"{HEADER_RULE}\n{url}\n{HEADER_RULE}\n\n{text}"
    lines = list(console_lines)
    if lines:
        result += f"\n\n{CONSOLE_RULE}\nCONSOLE OUTPUT:\n{CONSOLE_RULE}\n"
        result += "".join(f"{line}\n" for line in lines)
    return result


def _render(node: object, depth: int) -> str:
    if isinstance(node, _IGNORED_STRINGS):
        return ""
    if isinstance(node, NavigableString):
        return _WHITESPACE.sub(" ", str(node))
    if not isinstance(node, Tag):
        return ""

    name = (node.name or "").lower()
    if name in _SKIP_TAGS:
        return ""
    if name == "br":
        return "\n"
    if name == "hr":
        return "\n\n***\n\n"
    if name == "pre":
        body = node.get_text().strip("\n")
        return "\n\n" + "\n".join(_PRE_LINE + line for line in body.split("\n")) + "\n\n"
    if name in ("ul", "ol"):
        return _render_list(node, depth)
    if name == "tr":
        cells = [
            _inline(_render_children(cell, depth))
            for cell in node.find_all(["td", "th"], recursive=False)
        ]
        return "| " + " | ".join(cells) + " |\n"

    inner = _render_children(node, depth)
    if name in _HEADINGS:
        return "\n\n" + "#" * _HEADINGS[name] + " " + _inline(inner) + "\n\n"
    if name == "a":
        return _render_link(node, inner)
    if name == "li":
        return "\n* " + _inline(inner) + "\n"
    if name in _BLOCK_TAGS:
        return "\n\n" + inner + "\n\n"
    return inner


def _render_children(node: Tag, depth: int) -> str:
    return "".join(_render(child, depth) for child in node.children)


def _render_list(node: Tag, depth: int) -> str:
    ordered = node.name == "ol"
    indent = "  " * depth
    items: List[str] = []
    for child in node.children:
        if not isinstance(child, Tag) or child.name != "li":
            continue
        marker = f"{len(items) + 1}." if ordered else "*"
        body = _render_children(child, depth + 1).strip()
        body = re.sub(r"\n\s*\n", "\n", body)
        items.append(f"{indent}{marker} {body}")
    if not items:
        return ""
    return "\n\n" + "\n".join(items) + "\n\n"


def _render_link(node: Tag, inner: str) -> str:
    text = _inline(inner)
    href = str(node.get("href") or "").strip()
    if not href or href.startswith(("#", "javascript:")) or href == text:
        return inner
    if not text:
        return href
    return f"[{text}]({href})"


def _inline(text: str) -> str:
    return " ".join(text.split())


__all__ = [
    "CONSOLE_RULE",
    "HEADER_RULE",
    "TRUNCATION_NOTICE",
    "format_output",
    "html_to_text",
    "normalize_text",
    "truncate_text",
]
