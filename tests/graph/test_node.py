"""Tests for form nodes, copies, and the positional field contract."""

from collections.abc import Sequence
from decimal import Decimal

import pytest
from conftest import make_info

from taxgraph.core.exceptions import ConstructionError, FieldLayoutError
from taxgraph.graph.node import Attachment, FieldValue, FormNode
from taxgraph.tax.year_config import TAX_YEAR_2025


class TwoFieldForm(FormNode):
    tag = "twofield"
    sequence_index = 5
    FIELD_COUNT = 2

    def __init__(self, info, copy_index: int = 0, pages: int = 1, values=None) -> None:
        super().__init__(info, copy_index)
        self.pages = pages
        self.values = values if values is not None else [Decimal("1"), None]

    def _build_copies(self) -> list[FormNode]:
        return [TwoFieldForm(self.info, index) for index in range(1, self.pages)]

    def fields(self) -> Sequence[FieldValue]:
        return self.values


class MisnumberedForm(TwoFieldForm):
    def _build_copies(self) -> list[FormNode]:
        return [TwoFieldForm(self.info, 2)]


class TestFieldValues:
    """field_values() renders blanks and enforces the declared count."""

    def test_none_rendered_as_blank(self) -> None:
        form = TwoFieldForm(make_info())
        assert form.field_values() == [Decimal("1"), ""]

    def test_false_is_not_blank(self) -> None:
        form = TwoFieldForm(make_info(), values=[False, "x"])
        assert form.field_values() == [False, "x"]

    def test_count_mismatch_raises(self) -> None:
        form = TwoFieldForm(make_info(), values=[Decimal("1")])
        with pytest.raises(FieldLayoutError) as exc_info:
            form.field_values()
        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 1

    def test_fields_is_abstract(self) -> None:
        class Bare(FormNode):
            tag = "bare"
            sequence_index = 0
            FIELD_COUNT = 0

        with pytest.raises(TypeError):
            Bare(make_info())


class TestCopies:
    """Copies are contiguous from 1 and built once."""

    def test_no_copies_by_default(self) -> None:
        assert TwoFieldForm(make_info()).copies() == []

    def test_contiguous_indexes(self) -> None:
        form = TwoFieldForm(make_info(), pages=4)
        assert [copy.copy_index for copy in form.copies()] == [1, 2, 3]

    def test_built_once(self) -> None:
        form = TwoFieldForm(make_info(), pages=3)
        first = form.copies()
        second = form.copies()
        assert first == second
        assert all(a is b for a, b in zip(first, second))

    def test_returned_list_is_a_copy(self) -> None:
        form = TwoFieldForm(make_info(), pages=3)
        form.copies().clear()
        assert len(form.copies()) == 2

    def test_misnumbered_copy_rejected(self) -> None:
        with pytest.raises(ConstructionError, match="expected 1"):
            MisnumberedForm(make_info()).copies()


class TestFormNode:
    def test_year_config_follows_snapshot(self) -> None:
        assert TwoFieldForm(make_info(tax_year=2025)).year_config is TAX_YEAR_2025

    def test_needed_by_default(self) -> None:
        assert TwoFieldForm(make_info()).is_needed() is True

    def test_satisfies_attachment_protocol(self) -> None:
        assert isinstance(TwoFieldForm(make_info()), Attachment)

    def test_repr(self) -> None:
        assert repr(TwoFieldForm(make_info(), 2)) == "<TwoFieldForm tag='twofield' copy=2>"
