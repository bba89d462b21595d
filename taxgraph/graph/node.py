"""Form nodes and the protocols the assembly step relies on."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal
from typing import ClassVar, Protocol, Union, runtime_checkable

from taxgraph.core.exceptions import ConstructionError, FieldLayoutError
from taxgraph.graph.lines import LineOwner
from taxgraph.models.information import ValidatedInformation
from taxgraph.tax.year_config import TaxYearConfig, get_tax_year_config

FieldValue = Union[Decimal, str, bool, None]
"""A single positional value destined for a form template field."""


class FormNode(LineOwner, ABC):
    """One IRS form or schedule bound to a taxpayer snapshot.

    Subclasses declare ``tag``, ``sequence_index`` and ``FIELD_COUNT`` and
    implement ``fields()``. Attachments that repeat override
    ``_build_copies()``.

    Attributes:
        info: Read-only taxpayer snapshot.
        copy_index: 0 for the primary instance, 1..N-1 for copies.
    """

    tag: ClassVar[str]
    sequence_index: ClassVar[int]
    FIELD_COUNT: ClassVar[int]

    def __init__(self, info: ValidatedInformation, copy_index: int = 0) -> None:
        super().__init__()
        self.info = info
        self.copy_index = copy_index
        self._copies: list[FormNode] | None = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} tag={self.tag!r} copy={self.copy_index}>"

    @property
    def year_config(self) -> TaxYearConfig:
        """Federal parameters for the snapshot's tax year."""
        return get_tax_year_config(self.info.tax_year)

    def is_needed(self) -> bool:
        """Whether this form is filed. Pure and safe to call repeatedly."""
        return True

    def copies(self) -> list[FormNode]:
        """Additional instances of this form, built once per instance.

        Copies carry contiguous copy indexes starting at 1. The primary
        instance is always copy 0.

        Raises:
            ConstructionError: If ``_build_copies`` numbered its copies wrong.
        """
        if self._copies is None:
            built = self._build_copies()
            for expected, copy in enumerate(built, start=self.copy_index + 1):
                if copy.copy_index != expected:
                    raise ConstructionError(
                        f"Copy of '{self.tag}' has index {copy.copy_index}, expected {expected}",
                        details={"tag": self.tag, "expected": expected},
                    )
            self._copies = built
        return list(self._copies)

    def _build_copies(self) -> list[FormNode]:
        return []

    @abstractmethod
    def fields(self) -> Sequence[FieldValue]:
        """Positional values in template order. ``None`` marks a blank box."""

    def field_values(self) -> list[FieldValue]:
        """Positional values ready for a fillable template.

        Raises:
            FieldLayoutError: If the node produced a different number of
                values than its template declares.
        """
        values = list(self.fields())
        if len(values) != self.FIELD_COUNT:
            raise FieldLayoutError(self.tag, self.FIELD_COUNT, len(values))
        return ["" if value is None else value for value in values]


@runtime_checkable
class Attachment(Protocol):
    """Anything the assembly step can include in a filing set."""

    tag: str
    sequence_index: int
    copy_index: int

    def is_needed(self) -> bool: ...

    def copies(self) -> list[FormNode]: ...

    def field_values(self) -> list[FieldValue]: ...


@runtime_checkable
class ReturnRoot(Protocol):
    """A root form that owns the attachment catalog and the trailer rule."""

    tag: str
    sequence_index: int
    copy_index: int

    def attachments(self) -> list[FormNode]: ...

    def balance_due(self) -> Decimal: ...

    def payment_voucher(self) -> FormNode: ...

