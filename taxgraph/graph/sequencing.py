"""Assembly of the ordered filing set.

The filing set is the root form followed by every needed attachment and its
copies, stable sorted by sequence index. When the root reports a positive
balance due, the payment voucher goes last, outside the sort.

Example:
    >>> f1040 = create_f1040(info)
    >>> filing = assemble_filing_set(f1040)
    >>> filing.tags()
    ['f1040', 'f1040sb', 'f1040v']
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from taxgraph.graph.node import FieldValue, FormNode, ReturnRoot

logger = structlog.get_logger()


@dataclass
class FilingSet:
    """Final ordered list of forms for one computation pass.

    Attributes:
        forms: Forms in filing order; root first, trailer (if any) last.
        has_trailer: Whether a payment voucher was appended.
    """

    forms: list[FormNode] = field(default_factory=list)
    has_trailer: bool = False

    def __iter__(self) -> Iterator[FormNode]:
        return iter(self.forms)

    def __len__(self) -> int:
        return len(self.forms)

    @property
    def root(self) -> FormNode:
        """The root form."""
        return self.forms[0]

    def tags(self) -> list[str]:
        """Form tags in filing order, repeated once per copy."""
        return [form.tag for form in self.forms]

    def find(self, tag: str) -> list[FormNode]:
        """Every instance with the given tag, in filing order."""
        return [form for form in self.forms if form.tag == tag]

    def field_values(self) -> list[tuple[str, int, list[FieldValue]]]:
        """Positional values for every form as (tag, copy_index, values)."""
        return [(form.tag, form.copy_index, form.field_values()) for form in self.forms]


def assemble_filing_set(root: ReturnRoot) -> FilingSet:
    """Collect, expand and order the forms to file.

    Args:
        root: The root form. ``root.attachments()`` must return attachments
            in catalog order; ties on sequence index keep that order.

    Returns:
        FilingSet with the root first and the payment voucher, when a
        balance is due, last.
    """
    needed = [form for form in root.attachments() if form.is_needed()]
    expanded: list[FormNode] = [root]  # type: ignore[list-item]
    for form in needed:
        expanded.append(form)
        expanded.extend(form.copies())

    # sorted() is stable
    ordered = sorted(expanded, key=lambda form: form.sequence_index)

    has_trailer = root.balance_due() > 0
    if has_trailer:
        ordered.append(root.payment_voucher())

    filing_set = FilingSet(forms=ordered, has_trailer=has_trailer)
    logger.info(
        "filing_set_assembled",
        form_count=len(filing_set),
        tags=filing_set.tags(),
        has_trailer=has_trailer,
    )
    return filing_set
