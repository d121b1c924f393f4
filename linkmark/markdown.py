"""Markdown codec for the document tree.

Only paragraphs made of plain text and inline links are accepted; every
other CommonMark construct is rejected with MalformedMarkdownError.
"""

import logging
import re

from markdown_it import MarkdownIt
from markdown_it.token import Token
from markdown_it.tree import SyntaxTreeNode

from .constants import EditorConstants
from .document import Document, NodeKind
from .errors import IllegalStateError, MalformedMarkdownError

logger = logging.getLogger(__name__)

_parser = MarkdownIt("commonmark")

_INLINE_PUNCTUATION = re.compile(r"([\\`*_\[\]<>])")
_ENTITY_LIKE = re.compile(r"&(?=#[0-9]{1,7};|#[xX][0-9a-fA-F]{1,6};|[A-Za-z][A-Za-z0-9]*;)")
_ORDERED_LIST_MARKER = re.compile(r"([0-9]{1,9})[.)]")
_BLOCK_MARKERS = ("#", "-", "+", "~")  # Open a heading, list, thematic break or fence


def parse_markdown(text: str) -> Document:
    """Parse markdown into a new document.

    Args:
        text: Markdown source

    Returns:
        Document with one paragraph per markdown paragraph; empty input
        gives a document without paragraphs

    Raises:
        MalformedMarkdownError: If the input uses anything but paragraphs,
            plain text and single-text links
    """
    root = SyntaxTreeNode(_parser.parse(text))
    document = Document()

    for block in root.children:
        if block.type != "paragraph":
            raise MalformedMarkdownError(f"Not a paragraph, was: {block.type}")
        document.append_paragraph(_paragraph_of(document, block))

    logger.debug(f"Parsed {len(document.paragraphs)} paragraphs from markdown")
    return document


def _paragraph_of(document: Document, block: SyntaxTreeNode) -> int:
    paragraph = document.new_paragraph()

    for inline in block.children:
        for child in inline.children:
            if child.type == "text":
                document.append_plain_text(paragraph, child.content)
            elif child.type == "link":
                document.add_content(paragraph, _link_of(document, paragraph, child))
            else:
                raise MalformedMarkdownError(f"Not a text, was: {child.type}")

    if not document.children(paragraph):
        raise MalformedMarkdownError("Paragraph without content")
    return paragraph


def _link_of(document: Document, paragraph: int, node: SyntaxTreeNode) -> int:
    if len(node.children) != 1:
        raise MalformedMarkdownError(f"Not a single child, was: {len(node.children)}")
    child = node.children[0]
    if child.type != "text":
        raise MalformedMarkdownError(f"Not a text, was: {child.type}")
    return document.new_link(paragraph, child.content, str(node.attrs.get("href", "")))


def to_markdown(document: Document) -> str:
    """Serialize a document: paragraphs separated by blank lines, links inline."""
    return "".join(_paragraph_markdown(document, p) for p in document.paragraphs).strip()


def _paragraph_markdown(document: Document, paragraph: int) -> str:
    children = document.children(paragraph)
    parts = []
    for index, content in enumerate(children):
        part = _content_markdown(document, content)
        if document.kind(content) is NodeKind.TEXT:
            if index == 0:
                part = _escape_paragraph_start(part)
            if part.endswith("!") and index + 1 < len(children) \
                    and document.kind(children[index + 1]) is NodeKind.LINK:
                # '![' would open an image
                part = part[:-1] + "\\!"
        parts.append(part)
    return EditorConstants.PARAGRAPH_SEPARATOR + "".join(parts)


def _content_markdown(document: Document, content: int) -> str:
    kind = document.kind(content)
    if kind is NodeKind.TEXT:
        return _escape_text(document.content(content))
    if kind is NodeKind.LINK:
        return f"[{_escape_text(document.content(content))}]({_link_destination(document.target(content))})"
    raise IllegalStateError(f"Cannot serialize a {kind.value} as paragraph content")


def _escape_text(value: str) -> str:
    """Backslash-escape the characters that would start inline markup."""
    return _ENTITY_LIKE.sub(r"\\&", _INLINE_PUNCTUATION.sub(r"\\\1", value))


def _escape_paragraph_start(value: str) -> str:
    stripped = value.lstrip(" \t")
    indent = value[:len(value) - len(stripped)]
    if "\t" in indent or len(indent) >= 4:
        # Indented code; the first blank goes out as a character reference
        return f"&#{ord(value[0])};{value[1:]}"
    ordered = _ORDERED_LIST_MARKER.match(stripped)
    if ordered:
        return f"{indent}{ordered.group(1)}\\{stripped[ordered.end(1):]}"
    if stripped[:1] in _BLOCK_MARKERS:
        return f"{indent}\\{stripped}"
    return value


def _link_destination(target: str) -> str:
    target = target.replace("\\", "\\\\")
    if any(char in target for char in " \t()<>"):
        return "<" + target.replace("<", "\\<").replace(">", "\\>") + ">"
    return target


def strip_markdown(text: str) -> str:
    """Render any markdown as plain text.

    Link and emphasis markup is dropped while their text is kept; blocks
    are separated by a blank line. Unlike parse_markdown this never
    rejects its input.
    """
    blocks = []
    for token in _parser.parse(text):
        if token.type == "inline":
            blocks.append("".join(_plain_text(child) for child in token.children or []))
        elif token.type in ("code_block", "fence"):
            blocks.append(token.content.rstrip("\n"))
    return "\n\n".join(block for block in blocks if block)


def _plain_text(token: Token) -> str:
    if token.type in ("text", "code_inline", "image"):
        return token.content
    if token.type == "softbreak":
        return " "
    if token.type == "hardbreak":
        return "\n"
    return ""
