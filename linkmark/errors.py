"""Faults raised by the linkmark document model.

Every fault is a contract violation rather than an expected runtime
condition, so the model never retries or recovers: the exception
propagates to whoever issued the operation.
"""


class LinkmarkError(Exception):
    """Base class for all linkmark faults."""


class InvalidAddressError(LinkmarkError, LookupError):
    """Exception raised when an address does not resolve to a text run."""


class UnknownNodeError(LinkmarkError, KeyError):
    """Exception raised when a handle names no node (or a removed one)."""


class IllegalStateError(LinkmarkError):
    """Exception raised when an operation is invoked in the wrong state."""


class NoLinkableSelectionError(IllegalStateError):
    """Exception raised by link() without a current linkable selection."""


class NoLinkedSelectionError(IllegalStateError):
    """Exception raised by unlink() without a current linked selection."""


class EmptyParagraphError(IllegalStateError):
    """Exception raised when reading the first/last content of an empty paragraph."""


class RangeOutOfBoundsError(LinkmarkError, IndexError):
    """Exception raised when a character range lies outside its text run."""


class MalformedMarkdownError(LinkmarkError, ValueError):
    """Exception raised when markdown input falls outside the accepted grammar."""
