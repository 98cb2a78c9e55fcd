"""Markdown to HTML rendering for document bodies.

Bodies are CommonMark with tables, plus two constructs common in
Jekyll-era article sources:

* ``{% raw %}`` / ``{% endraw %}`` markers, which are dropped. Braces inside a
  raw region are kept verbatim.
* kramdown block attribute lists such as ``{: .bad-code}`` on the line after
  a block, which set attributes on that block.

Any other template tag outside code is unsupported and raises ``RenderError``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from markdown_it import MarkdownIt

from folio.core.exceptions import RenderError

if TYPE_CHECKING:
    from markdown_it.rules_core import StateCore
    from markdown_it.token import Token

_RAW_MARKER_RE = re.compile(r"\{%-?\s*(raw|endraw)\s*-?%\}")
_TEMPLATE_TAG_RE = re.compile(r"\{[{%]")
_IAL_LINE_RE = re.compile(r"^\s*\{:(?P<body>[^}]*)\}\s*$")
_IAL_ITEM_RE = re.compile(
    r"\s*(?:\.(?P<cls>[\w-]+)|#(?P<id>[\w-]+)|(?P<key>[\w-]+)=(?P<val>\"[^\"]*\"|'[^']*'|[^\s\"']+))"
)

# Braces inside raw regions are swapped for this private-use character while
# parsing so that they do not look like template tags.
_RAW_BRACE = "\ue000"
# The same character after link normalisation has percent-encoded it.
_RAW_BRACE_ENCODED = "%EE%80%80"


def _source(state: StateCore) -> str:
    return str(state.env.get("source", "<string>"))


def parse_attribute_list(body: str, source: str = "<string>") -> list[tuple[str, str]]:
    """Parse the inside of ``{: ...}`` into (name, value) pairs.

    Raises:
        RenderError: If the list is empty or holds anything other than
            ``.class``, ``#id`` and ``key=value`` items.

    """
    attrs: list[tuple[str, str]] = []
    pos = 0
    text = body.rstrip()
    while pos < len(text):
        match = _IAL_ITEM_RE.match(text, pos)
        if match is None or match.end() == pos:
            raise RenderError(source, f"unsupported attribute list '{{:{body}}}'")
        if match.group("cls"):
            attrs.append(("class", match.group("cls")))
        elif match.group("id"):
            attrs.append(("id", match.group("id")))
        else:
            attrs.append((match.group("key"), match.group("val").strip("\"'")))
        pos = match.end()
    if not attrs:
        raise RenderError(source, "empty attribute list '{:}'")
    return attrs


def _apply_attrs(token: Token, attrs: list[tuple[str, str]]) -> None:
    for name, value in attrs:
        if name == "class":
            token.attrJoin("class", value)
        else:
            token.attrSet(name, value)


def _preceding_block(tokens: list[Token], idx: int) -> Token | None:
    """Return the opening token of the block right before ``tokens[idx]`` at the same level."""
    level = tokens[idx].level
    prev = idx - 1
    if prev < 0 or tokens[prev].level != level or tokens[prev].nesting == 1:
        return None
    if tokens[prev].nesting == 0:
        return tokens[prev]

    opener_type = tokens[prev].type.removesuffix("_close") + "_open"
    for back in range(prev - 1, -1, -1):
        candidate = tokens[back]
        if candidate.level == level and candidate.nesting == 1 and candidate.type == opener_type:
            return candidate
    return None


def _attribute_lists(state: StateCore) -> None:
    """Apply ``{: ...}`` lines to the block they follow."""
    tokens = state.tokens
    source = _source(state)
    drop: set[int] = set()

    for idx, token in enumerate(tokens):
        if token.type != "inline" or idx == 0 or tokens[idx - 1].type != "paragraph_open":
            continue

        lines = token.content.split("\n")
        match = _IAL_LINE_RE.match(lines[-1])
        if match is None:
            continue
        attrs = parse_attribute_list(match.group("body"), source)

        if len(lines) > 1:
            # Trailing line of a paragraph applies to that paragraph.
            token.content = "\n".join(lines[:-1])
            _apply_attrs(tokens[idx - 1], attrs)
            continue

        target = _preceding_block(tokens, idx - 1)
        if target is None:
            raise RenderError(source, f"attribute list '{lines[-1].strip()}' does not follow a block")
        _apply_attrs(target, attrs)
        drop.update({idx - 1, idx, idx + 1})

    if drop:
        state.tokens = [token for idx, token in enumerate(tokens) if idx not in drop]


def _check_fences(state: StateCore) -> None:
    """Reject fenced code blocks that run to the end of their container."""
    lines = state.src.split("\n")
    for token in state.tokens:
        if token.type != "fence" or token.map is None:
            continue
        start, end = token.map
        closing = lines[end - 1].lstrip(" \t>").rstrip() if end - 1 < len(lines) else ""
        is_closed = (
            end - start >= 2
            and len(closing) >= len(token.markup)
            and set(closing) == {token.markup[0]}
        )
        if not is_closed:
            raise RenderError(_source(state), f"unterminated code fence opened on line {start + 1}")


def _reject_template_tag(text: str, source: str) -> None:
    tag = _TEMPLATE_TAG_RE.search(text)
    if tag is not None:
        snippet = text[tag.start() : tag.start() + 40].strip()
        raise RenderError(source, f"unsupported template tag near '{snippet}'")


def _check_template_tags(state: StateCore) -> None:
    """Reject Liquid/Jinja tags that survive outside raw regions and code.

    Text, raw HTML and link or image targets are all checked. Targets are
    percent-encoded by the parser, so they are decoded before the check.
    """
    source = _source(state)
    for token in state.tokens:
        if token.type == "html_block":
            _reject_template_tag(token.content, source)
            continue
        if token.type != "inline" or not token.children:
            continue

        run = ""
        for child in [*token.children, None]:
            if child is not None and child.type == "text":
                run += child.content
                continue
            _reject_template_tag(run, source)
            run = ""
            if child is None:
                continue
            if child.type == "html_inline":
                _reject_template_tag(child.content, source)
            elif child.type in {"link_open", "image"}:
                target = child.attrGet("href" if child.type == "link_open" else "src")
                _reject_template_tag(state.md.normalizeLinkText(str(target or "")), source)
                _reject_template_tag(str(child.attrGet("title") or ""), source)
                if child.type == "image":
                    _reject_template_tag(child.content, source)


def _restore_raw_braces(state: StateCore) -> None:
    """Put raw-region braces back into attributes such as link targets."""
    for token in state.tokens:
        for item in [token, *(token.children or [])]:
            for name, value in list(item.attrs.items()):
                if isinstance(value, str) and (_RAW_BRACE in value or _RAW_BRACE_ENCODED in value):
                    restored = value.replace(_RAW_BRACE_ENCODED, "%7B").replace(_RAW_BRACE, "{")
                    item.attrSet(name, restored)


def _strip_raw_markers(body: str, source: str) -> str:
    pieces: list[str] = []
    pos = 0
    in_raw = False
    for match in _RAW_MARKER_RE.finditer(body):
        segment = body[pos : match.start()]
        pieces.append(segment.replace("{", _RAW_BRACE) if in_raw else segment)
        opening = match.group(1) == "raw"
        if opening == in_raw:
            raise RenderError(source, f"unbalanced '{match.group(0)}'")
        in_raw = opening
        pos = match.end()
    if in_raw:
        raise RenderError(source, "'{% raw %}' is never closed")
    pieces.append(body[pos:])
    return "".join(pieces)


class MarkdownRenderer:
    """Renders document bodies to HTML fragments."""

    def __init__(self) -> None:
        self._md = MarkdownIt("commonmark", {"html": True}).enable("table")
        self._md.core.ruler.after("block", "attribute_lists", _attribute_lists)
        self._md.core.ruler.after("attribute_lists", "check_fences", _check_fences)
        self._md.core.ruler.after("inline", "check_template_tags", _check_template_tags)
        self._md.core.ruler.after("check_template_tags", "restore_raw_braces", _restore_raw_braces)

    def render(self, body: str, source: str = "<string>") -> str:
        """Render Markdown to HTML.

        Raises:
            RenderError: If the body uses unsupported or malformed constructs.

        """
        text = _strip_raw_markers(body, source)
        html = self._md.render(text, {"source": source})
        return html.replace(_RAW_BRACE, "{")
