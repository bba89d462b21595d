"""Tests for filing set assembly."""

from dataclasses import dataclass, field
from decimal import Decimal

from structlog.testing import capture_logs

from taxgraph.graph.node import ReturnRoot
from taxgraph.graph.sequencing import FilingSet, assemble_filing_set


@dataclass
class StubForm:
    tag: str
    sequence_index: int
    needed: bool = True
    copy_index: int = 0
    extra: list["StubForm"] = field(default_factory=list)

    def is_needed(self) -> bool:
        return self.needed

    def copies(self) -> list["StubForm"]:
        return list(self.extra)

    def field_values(self) -> list:
        return [self.tag]


@dataclass
class StubRoot(StubForm):
    catalog: list[StubForm] = field(default_factory=list)
    owed: Decimal = Decimal("0")
    voucher: StubForm = field(default_factory=lambda: StubForm("voucher", 1000))

    def attachments(self) -> list[StubForm]:
        return list(self.catalog)

    def balance_due(self) -> Decimal:
        return self.owed

    def payment_voucher(self) -> StubForm:
        return self.voucher


def _root(*catalog: StubForm, owed: str = "0") -> StubRoot:
    return StubRoot("root", 0, catalog=list(catalog), owed=Decimal(owed))


class TestAssembly:
    """Root first, needed forms with copies, stable sort, trailer last."""

    def test_stub_root_is_a_return_root(self) -> None:
        assert isinstance(_root(), ReturnRoot)

    def test_empty_catalog(self) -> None:
        filing = assemble_filing_set(_root())
        assert filing.tags() == ["root"]
        assert filing.has_trailer is False

    def test_unneeded_forms_dropped(self) -> None:
        filing = assemble_filing_set(_root(StubForm("a", 1, needed=False), StubForm("b", 2)))
        assert filing.tags() == ["root", "b"]

    def test_sorted_by_sequence_index(self) -> None:
        filing = assemble_filing_set(_root(StubForm("late", 9), StubForm("early", 3)))
        assert filing.tags() == ["root", "early", "late"]

    def test_ties_keep_catalog_order(self) -> None:
        filing = assemble_filing_set(
            _root(StubForm("first", 12), StubForm("other", 4), StubForm("second", 12))
        )
        assert filing.tags() == ["root", "other", "first", "second"]

    def test_copies_follow_their_form(self) -> None:
        pages = [StubForm("a", 5, copy_index=1), StubForm("a", 5, copy_index=2)]
        filing = assemble_filing_set(_root(StubForm("a", 5, extra=pages), StubForm("b", 5)))
        assert [(f.tag, f.copy_index) for f in filing] == [
            ("root", 0),
            ("a", 0),
            ("a", 1),
            ("a", 2),
            ("b", 0),
        ]

    def test_copies_of_unneeded_form_ignored(self) -> None:
        hidden = StubForm("a", 5, needed=False, extra=[StubForm("a", 5, copy_index=1)])
        assert assemble_filing_set(_root(hidden)).tags() == ["root"]

    def test_trailer_appended_when_balance_due(self) -> None:
        filing = assemble_filing_set(_root(StubForm("big", 5000), owed="0.01"))
        assert filing.tags() == ["root", "big", "voucher"]
        assert filing.has_trailer is True

    def test_no_trailer_when_nothing_owed(self) -> None:
        filing = assemble_filing_set(_root(StubForm("a", 1), owed="0"))
        assert "voucher" not in filing.tags()

    def test_logs_assembly(self) -> None:
        with capture_logs() as logs:
            assemble_filing_set(_root(StubForm("a", 1)))
        assert any(entry["event"] == "filing_set_assembled" for entry in logs)


class TestFilingSet:
    def test_accessors(self) -> None:
        root = StubForm("root", 0)
        a = StubForm("a", 1)
        filing = FilingSet(forms=[root, a, StubForm("a", 1, copy_index=1)])
        assert len(filing) == 3
        assert filing.root is root
        assert filing.find("a")[0] is a
        assert [copy.copy_index for copy in filing.find("a")] == [0, 1]
        assert filing.field_values()[1] == ("a", 0, ["a"])
