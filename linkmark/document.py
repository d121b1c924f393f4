"""Document tree: paragraphs holding plain text runs and links.

Nodes live in an arena owned by the :class:`Document` and are addressed by
integer handles. Every node records its parent handle and containers keep
an ordered list of child handles, so a handle held by a caller stays valid
until the node it names is removed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Sequence

from .constants import EditorConstants
from .errors import (
    EmptyParagraphError,
    IllegalStateError,
    InvalidAddressError,
    RangeOutOfBoundsError,
    UnknownNodeError,
)


class NodeKind(Enum):
    """Kinds of nodes in the document tree."""
    PARAGRAPH = "paragraph"
    LINK = "link"
    TEXT = "text"


@dataclass
class Node:
    """One arena entry.

    Attributes:
        handle: Arena key of this node
        kind: Paragraph, link or text run
        parent: Handle of the owning node; None for paragraphs and detached nodes
        children: Ordered child handles (paragraph content, or a link's single run)
        content: Characters of a text run
        target: Destination of a link
    """
    handle: int
    kind: NodeKind
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)
    content: str = ""
    target: str = ""


@dataclass(frozen=True)
class Point:
    """A cursor location: a text run handle and a character offset."""
    text: int
    offset: int


class Document:
    """The root of the tree: an ordered list of paragraphs plus the node arena."""
    paragraphs: list[int]

    def __init__(self):
        self._nodes: dict[int, Node] = {}
        self._next_handle = 0
        self.paragraphs = []

    @classmethod
    def of_markdown(cls, text: str) -> "Document":
        from .markdown import parse_markdown
        return parse_markdown(text)

    def to_markdown(self) -> str:
        from .markdown import to_markdown
        return to_markdown(self)

    # --- Node creation and access ---

    def _create(self, kind: NodeKind, parent: Optional[int] = None, target: str = "") -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._nodes[handle] = Node(handle=handle, kind=kind, parent=parent, target=target)
        return handle

    def new_paragraph(self) -> int:
        """Create a detached, empty paragraph."""
        return self._create(NodeKind.PARAGRAPH)

    def new_text(self, parent: Optional[int] = None, content: str = "") -> int:
        """Create a text run; it is not added to the parent's content."""
        handle = self._create(NodeKind.TEXT, parent)
        self.set_content(handle, content)
        return handle

    def new_link(self, parent: Optional[int], content: str, target: str) -> int:
        """Create a link together with its display run."""
        link = self._create(NodeKind.LINK, parent, target=target)
        self.node(link).children.append(self.new_text(link, content))
        return link

    def node(self, handle: int) -> Node:
        try:
            return self._nodes[handle]
        except KeyError:
            raise UnknownNodeError(f"No node with handle {handle}") from None

    def __contains__(self, handle: int) -> bool:
        return handle in self._nodes

    def kind(self, handle: int) -> NodeKind:
        return self.node(handle).kind

    def parent(self, handle: int) -> Optional[int]:
        return self.node(handle).parent

    def children(self, handle: int) -> list[int]:
        """Return a copy of the child handles."""
        return list(self.node(handle).children)

    def target(self, link: int) -> str:
        return self._expect(link, NodeKind.LINK).target

    def _expect(self, handle: int, kind: NodeKind) -> Node:
        node = self.node(handle)
        if node.kind is not kind:
            raise IllegalStateError(f"Expected a {kind.value} node, was: {node.kind.value}")
        return node

    def text_of(self, handle: int) -> int:
        """Return the text run of a paragraph content node (a run or a link)."""
        node = self.node(handle)
        if node.kind is NodeKind.TEXT:
            return handle
        if node.kind is NodeKind.LINK:
            return node.children[0]
        raise IllegalStateError(f"A paragraph has no single text run (handle {handle})")

    def content(self, handle: int) -> str:
        """Return the characters of a text run, or of a link's display run."""
        return self.node(self.text_of(handle)).content

    def set_content(self, handle: int, value: str):
        """Replace the characters of a run; empty values store a placeholder."""
        self.node(self.text_of(handle)).content = value or EditorConstants.PLACEHOLDER

    def append_text(self, handle: int, value: str):
        self.set_content(handle, self.content(handle) + value)

    def length(self, handle: int) -> int:
        return len(self.content(handle))

    def is_in_link(self, text: int) -> bool:
        parent = self.parent(text)
        return parent is not None and self.kind(parent) is NodeKind.LINK

    def _content_node(self, text: int) -> int:
        """The paragraph-level node holding a run: the run itself or its link."""
        self._expect(text, NodeKind.TEXT)
        return self.parent(text) if self.is_in_link(text) else text

    def containing_link(self, text: int) -> Optional[int]:
        return self.parent(text) if self.is_in_link(text) else None

    def containing_paragraph(self, handle: int) -> int:
        node = self.node(handle)
        while node.kind is not NodeKind.PARAGRAPH:
            if node.parent is None:
                raise IllegalStateError(f"Node {handle} is not attached to a paragraph")
            node = self.node(node.parent)
        return node.handle

    # --- Addressing ---

    @staticmethod
    def _child_at(children: list[int], index: int, address: Sequence[int]) -> int:
        if not 0 <= index < len(children):
            raise InvalidAddressError(f"Index {index} out of range in address {tuple(address)}")
        return children[index]

    def resolve(self, address: Sequence[int]) -> int:
        """Walk an address of child indices from the root down to a text run."""
        if len(address) < 2:
            raise InvalidAddressError(f"Address {tuple(address)} does not reach a text run")
        paragraph = self._child_at(self.paragraphs, address[0], address)
        content = self._child_at(self.node(paragraph).children, address[1], address)
        rest = tuple(address[2:])
        kind = self.kind(content)
        if kind is NodeKind.TEXT:
            if rest:
                raise InvalidAddressError(f"Address {tuple(address)} continues below a text run")
            return content
        if kind is NodeKind.LINK:
            if rest != (0,):
                raise InvalidAddressError(f"Address {tuple(address)} must end with index 0 inside a link")
            return self.text_of(content)
        raise InvalidAddressError(f"Address {tuple(address)} resolves to a {kind.value}")

    def address_of(self, text: int) -> tuple[int, ...]:
        """Inverse of :meth:`resolve`."""
        content = self._content_node(text)
        paragraph = self.parent(content)
        address = (self.paragraphs.index(paragraph), self.node(paragraph).children.index(content))
        if content != text:
            address += (0,)
        return address

    # --- Paragraph structure ---

    def append_paragraph(self, paragraph: int):
        self.paragraphs.append(paragraph)

    def insert_paragraph_before(self, paragraph: int, ref: int):
        self.paragraphs.insert(self.paragraphs.index(ref), paragraph)

    def add_content(self, paragraph: int, content: int):
        self._expect(paragraph, NodeKind.PARAGRAPH).children.append(content)
        self.node(content).parent = paragraph

    def add_content_before(self, paragraph: int, content: int, ref: int):
        children = self._expect(paragraph, NodeKind.PARAGRAPH).children
        children.insert(children.index(ref), content)
        self.node(content).parent = paragraph

    def _move_content(self, content: int, paragraph: int):
        """Re-parent a content node onto the end of another paragraph."""
        old_parent = self.parent(content)
        if old_parent is not None:
            self.node(old_parent).children.remove(content)
        self.add_content(paragraph, content)

    def _discard(self, handle: int):
        node = self._nodes.pop(handle)
        for child in node.children:
            self._discard(child)

    def remove_paragraph(self, paragraph: int):
        self.paragraphs.remove(paragraph)
        self._discard(paragraph)

    def remove_content(self, container: int, child: int):
        """Remove a child; a container left empty is removed in turn."""
        node = self.node(container)
        if node.kind is NodeKind.LINK:
            if child not in node.children:
                raise IllegalStateError(f"Run {child} is not the text of link {container}")
            self.remove_content(node.parent, container)
        elif len(node.children) == 1:
            self.remove_paragraph(container)
        else:
            node.children.remove(child)
            self._discard(child)

    def first_content(self, paragraph: int) -> int:
        children = self._expect(paragraph, NodeKind.PARAGRAPH).children
        if not children:
            raise EmptyParagraphError("No content in paragraph")
        return children[0]

    def last_content(self, paragraph: int) -> int:
        children = self._expect(paragraph, NodeKind.PARAGRAPH).children
        if not children:
            raise EmptyParagraphError("No content in paragraph")
        return children[-1]

    def first_text(self, paragraph: int) -> int:
        return self.text_of(self.first_content(paragraph))

    def last_text(self, paragraph: int) -> int:
        return self.text_of(self.last_content(paragraph))

    def plain_text(self, paragraph: int) -> str:
        """Characters of a paragraph with link markup dropped."""
        return "".join(self.content(c) for c in self.node(paragraph).children)

    def texts(self) -> Iterator[int]:
        """Yield every text run in document order."""
        for paragraph in self.paragraphs:
            for content in self.node(paragraph).children:
                yield self.text_of(content)

    def seed(self) -> Point:
        """Give an empty document one paragraph holding one placeholder run."""
        paragraph = self.new_paragraph()
        text = self.new_text(paragraph)
        self.add_content(paragraph, text)
        self.append_paragraph(paragraph)
        return Point(text, 0)

    def start_point(self) -> Point:
        return Point(self.first_text(self.paragraphs[0]), 0)

    # --- Adjacency ---

    def preceding_text(self, text: int) -> Optional[int]:
        content = self._content_node(text)
        paragraph = self.parent(content)
        siblings = self.node(paragraph).children
        index = siblings.index(content)
        if index > 0:
            return self.text_of(siblings[index - 1])
        paragraph_index = self.paragraphs.index(paragraph)
        if paragraph_index > 0:
            return self.last_text(self.paragraphs[paragraph_index - 1])
        return None

    def following_text(self, text: int) -> Optional[int]:
        content = self._content_node(text)
        paragraph = self.parent(content)
        siblings = self.node(paragraph).children
        index = siblings.index(content)
        if index + 1 < len(siblings):
            return self.text_of(siblings[index + 1])
        paragraph_index = self.paragraphs.index(paragraph)
        if paragraph_index + 1 < len(self.paragraphs):
            return self.first_text(self.paragraphs[paragraph_index + 1])
        return None

    # --- Text run editing ---

    def insert_char(self, text: int, char: str, offset: int) -> Point:
        content = self.content(text)
        self.set_content(text, content[:offset] + char + content[offset:])
        return Point(text, offset + 1)

    def remove_text(self, text: int) -> Optional[Point]:
        """Remove a run, returning the end of the run that preceded it."""
        previous = self.preceding_text(text)
        self.remove_content(self.parent(text), text)
        if previous is not None:
            return Point(previous, self.length(previous))
        return None

    def _check_range(self, text: int, start: int, end: int) -> str:
        content = self.content(text)
        if start < 0 or end > len(content) or start > end:
            raise RangeOutOfBoundsError(
                f"remove range not in bounds, {start} .. {end} of [{content}] ({len(content)})"
            )
        return content

    def remove_range(self, text: int, start: int, end: int) -> Optional[Point]:
        content = self._check_range(text, start, end)
        if start == 0 and end == len(content):
            return self.remove_text(text)
        self.set_content(text, content[:start] + content[end:])
        return Point(text, start)

    def truncate(self, text: int, start: int, end: int):
        """Keep only ``[start, end)`` of a run, in place."""
        content = self._check_range(text, start, end)
        self.set_content(text, content[start:end])

    def remove_first_character(self, text: int) -> Optional[Point]:
        if self.length(text) <= 1:
            return self.remove_text(text)
        return self.remove_range(text, 0, 1)

    def remove_last_character(self, text: int) -> Optional[Point]:
        length = self.length(text)
        if length <= 1:
            return self.remove_text(text)
        return self.remove_range(text, length - 1, length)

    def remove_next_char(self, text: int, offset: int) -> Optional[Point]:
        """Delete forward from a cursor, joining paragraphs at a boundary.

        Returns the new cursor, or None when nothing precedes a removed run.
        At the very end of the document this is a no-op returning None.
        """
        if offset < self.length(text):
            return self.remove_range(text, offset, offset + 1)
        following = self.following_text(text)
        if following is None:
            return None
        paragraph = self.containing_paragraph(text)
        following_paragraph = self.containing_paragraph(following)
        if following_paragraph != paragraph:
            return self.combine_with(paragraph, following_paragraph)
        return self.remove_first_character(following)

    def remove_previous_char(self, text: int, offset: int) -> Optional[Point]:
        """Delete backward from a cursor, joining paragraphs at a boundary."""
        if offset > 0:
            return self.remove_range(text, offset - 1, offset)
        previous = self.preceding_text(text)
        if previous is None:
            return None
        paragraph = self.containing_paragraph(text)
        previous_paragraph = self.containing_paragraph(previous)
        if previous_paragraph != paragraph:
            return self.combine_with(previous_paragraph, paragraph)
        return self.remove_last_character(previous)

    # --- Paragraph surgery ---

    def append_plain_text(self, paragraph: int, value: str):
        """Append characters to a trailing plain run, or add a new run."""
        children = self.node(paragraph).children
        if children and self.kind(children[-1]) is NodeKind.TEXT:
            self.append_text(children[-1], value)
        else:
            self.add_content(paragraph, self.new_text(paragraph, value))

    def combine_with(self, paragraph: int, other: int) -> Optional[Point]:
        """Append ``other`` onto ``paragraph`` and remove ``other``.

        Adjacent plain runs at the seam are fused; a whitespace-only run at
        the end of ``paragraph`` is replaced rather than extended. Returns
        the point at the former boundary, or None for a self-merge.
        """
        if other == paragraph:
            return None

        last = self.last_content(paragraph)
        last_text = self.text_of(last)
        before = self.content(last_text)
        blank = before.strip() == ""

        for index, content in enumerate(self.children(other)):
            if index == 0 and self.kind(last) is NodeKind.TEXT and self.kind(content) is NodeKind.TEXT:
                if blank:
                    self.set_content(last, self.content(content))
                else:
                    self.append_text(last, self.content(content))
            else:
                self._move_content(content, paragraph)

        self.remove_paragraph(other)
        return Point(last_text, 0 if blank else len(before))

    def split_to(self, paragraph: int, prefix: int, text: int, offset: int) -> Point:
        """Move everything before ``(text, offset)`` into ``prefix``.

        The split run keeps its handle and holds the characters after the
        offset. Returns offset 0 of the first run left in ``paragraph``.
        """
        if self.containing_paragraph(text) != paragraph:
            raise IllegalStateError(f"Run {text} is not in paragraph {paragraph}")

        for content in self.children(paragraph):
            if self.text_of(content) == text:
                value = self.content(text)
                if value[:offset]:
                    self.append_plain_text(prefix, value[:offset])
                self.set_content(text, value[offset:])
                break
            self._move_content(content, prefix)

        if not self.node(prefix).children:
            self.add_content(prefix, self.new_text(prefix))

        return Point(self.first_text(paragraph), 0)

    def merge_consecutive_texts(self, paragraph: int, cursor: Point) -> Point:
        """Fuse adjacent plain runs, rewriting the cursor if its run is absorbed."""
        result = cursor
        children = self.node(paragraph).children
        index = 1
        while index < len(children):
            previous = children[index - 1]
            current = children[index]
            if self.kind(previous) is NodeKind.TEXT and self.kind(current) is NodeKind.TEXT:
                length_before = self.length(previous)
                self.append_text(previous, self.content(current))
                if cursor.text == current:
                    result = Point(previous, length_before + result.offset)
                children.pop(index)
                self._discard(current)
            else:
                index += 1
        return result

    # --- Diagnostics ---

    def check_invariants(self):
        """Raise IllegalStateError describing the first broken structural invariant."""
        for paragraph in self.paragraphs:
            node = self._expect(paragraph, NodeKind.PARAGRAPH)
            if not node.children:
                raise IllegalStateError(f"Paragraph {paragraph} is empty")
            for content in node.children:
                child = self.node(content)
                if child.parent != paragraph:
                    raise IllegalStateError(f"Node {content} does not point back to paragraph {paragraph}")
                if child.kind is NodeKind.LINK:
                    if len(child.children) != 1 or self.kind(child.children[0]) is not NodeKind.TEXT:
                        raise IllegalStateError(f"Link {content} must own exactly one text run")
                    run = self.node(child.children[0])
                    if run.parent != content:
                        raise IllegalStateError(f"Run {run.handle} does not point back to link {content}")
                elif child.kind is NodeKind.TEXT:
                    run = child
                else:
                    raise IllegalStateError(f"Paragraph {paragraph} contains a {child.kind.value}")
                if not run.content:
                    raise IllegalStateError(f"Run {run.handle} is empty")
