"""
Exceptions raised by the extraction engine.
"""

from __future__ import annotations


class DecruftError(Exception):
    """Base exception for extraction errors."""

    pass


class InputTooLargeError(DecruftError):
    """Raised when a document has more elements than the configured maximum.

    The check runs before the document is touched, so the caller can skip the
    document and keep its tree intact.
    """

    def __init__(self, element_count: int, max_elements: int) -> None:
        self.element_count = element_count
        self.max_elements = max_elements
        super().__init__(f"Aborting parsing document; {element_count} elements found (maximum {max_elements})")
