"""
GlyphWeave Exceptions
======================

Typed failures raised by the weaving and analysis core. Every error is
raised before any result is built, so a failing call never hands back a
partially populated token stream, graph, or alignment.

Hierarchy::

    GlyphWeaveError
    +-- GridValidationError
    +-- WeaveStructureError
    +-- AnalysisPreconditionError
    |   +-- AnchorBoundsError
    +-- MessageNotFoundError
    +-- CorpusFormatError
"""

from __future__ import annotations

from typing import Optional


class GlyphWeaveError(Exception):
    """Base class for every GlyphWeave failure."""

    pass


class GridValidationError(GlyphWeaveError):
    """A glyph grid row is empty or contains a digit outside 0-4.

    Attributes:
        message_id: Identifier of the message being built.
        row: Zero-based row index of the offending row.
        column: Zero-based column of the offending glyph, or ``None``
            when the whole row is at fault (empty row).
    """

    def __init__(
        self,
        reason: str,
        *,
        message_id: int,
        row: int,
        column: Optional[int] = None,
    ) -> None:
        self.message_id = message_id
        self.row = row
        self.column = column
        location = f"row {row}" if column is None else f"row {row}, col {column}"
        super().__init__(f"Message {message_id}: {reason} at {location}.")


class WeaveStructureError(GlyphWeaveError):
    """A grid cannot be woven into trigrams.

    Raised for an odd row count (``top_row`` is the unpaired row and
    ``bottom_row`` is ``None``) or for a row pair whose glyph counts are
    not fully consumed by the alternating Down/Up stepping rule.
    """

    def __init__(
        self,
        reason: str,
        *,
        message_id: int,
        top_row: int,
        bottom_row: Optional[int] = None,
        top_consumed: int = 0,
        top_length: int = 0,
        bottom_consumed: int = 0,
        bottom_length: int = 0,
    ) -> None:
        self.message_id = message_id
        self.top_row = top_row
        self.bottom_row = bottom_row
        self.top_consumed = top_consumed
        self.top_length = top_length
        self.bottom_consumed = bottom_consumed
        self.bottom_length = bottom_length
        super().__init__(reason)

    @classmethod
    def odd_rows(cls, message_id: int, row_count: int) -> WeaveStructureError:
        """Build the error for a grid whose rows cannot be paired."""
        return cls(
            f"Message {message_id} has an odd number of rows ({row_count}).",
            message_id=message_id,
            top_row=row_count - 1,
        )

    @classmethod
    def unconsumed(
        cls,
        message_id: int,
        top_row: int,
        top_consumed: int,
        top_length: int,
        bottom_consumed: int,
        bottom_length: int,
    ) -> WeaveStructureError:
        """Build the error for a row pair left with unread glyphs."""
        return cls(
            f"Weave did not consume all glyphs for message {message_id} "
            f"row pair {top_row}/{top_row + 1}. "
            f"Consumed top {top_consumed}/{top_length}, "
            f"bottom {bottom_consumed}/{bottom_length}.",
            message_id=message_id,
            top_row=top_row,
            bottom_row=top_row + 1,
            top_consumed=top_consumed,
            top_length=top_length,
            bottom_consumed=bottom_consumed,
            bottom_length=bottom_length,
        )


class AnalysisPreconditionError(GlyphWeaveError):
    """An analysis parameter is outside its valid domain."""

    pass


class AnchorBoundsError(AnalysisPreconditionError):
    """An alignment anchor does not fit inside the sequences.

    Attributes:
        sequence: ``"A"`` or ``"B"``, or ``None`` for a bad anchor length.
        bound: ``"length"``, ``"start"`` or ``"end"``.
        value: The offending anchor start, end or length.
        length: Length of the sequence the anchor had to fit in.
    """

    def __init__(
        self,
        reason: str,
        *,
        sequence: Optional[str],
        bound: str,
        value: int,
        length: Optional[int] = None,
    ) -> None:
        self.sequence = sequence
        self.bound = bound
        self.value = value
        self.length = length
        super().__init__(reason)


class MessageNotFoundError(GlyphWeaveError):
    """The message store has no message with the requested id."""

    def __init__(self, message_id: int) -> None:
        self.message_id = message_id
        super().__init__(f"Message {message_id} not found.")


class CorpusFormatError(GlyphWeaveError):
    """The corpus file is not a JSON object of id -> digit fragments."""

    pass
