"""Linkmark - an editable document model of paragraphs, text and links."""

from .document import Document, NodeKind, Point
from .errors import (
    IllegalStateError,
    InvalidAddressError,
    LinkmarkError,
    MalformedMarkdownError,
    NoLinkableSelectionError,
    NoLinkedSelectionError,
)
from .markdown import parse_markdown, strip_markdown, to_markdown
from .model import MarkdownModel, MemoryHost, SelectionHost
from .selection import HostPoint, HostSelection, Selection

__all__ = [
    'Document',
    'NodeKind',
    'Point',
    'IllegalStateError',
    'InvalidAddressError',
    'LinkmarkError',
    'MalformedMarkdownError',
    'NoLinkableSelectionError',
    'NoLinkedSelectionError',
    'parse_markdown',
    'strip_markdown',
    'to_markdown',
    'MarkdownModel',
    'MemoryHost',
    'SelectionHost',
    'HostPoint',
    'HostSelection',
    'Selection',
]
