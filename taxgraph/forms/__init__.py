"""Form 1040 and its attachment catalog."""

from taxgraph.forms.f1040 import F1040, Construct
from taxgraph.forms.f1040v import F1040V
from taxgraph.forms.f8889 import F8889
from taxgraph.forms.f8936 import F8936
from taxgraph.forms.f8949 import F8949
from taxgraph.forms.qualified_dividends_worksheet import QualifiedDividendsWorksheet
from taxgraph.forms.schedule_1 import Schedule1
from taxgraph.forms.schedule_2 import Schedule2
from taxgraph.forms.schedule_3 import Schedule3
from taxgraph.forms.schedule_8812 import Schedule8812
from taxgraph.forms.schedule_a import ScheduleA
from taxgraph.forms.schedule_b import ScheduleB
from taxgraph.forms.schedule_d import ScheduleD
from taxgraph.forms.schedule_e import ScheduleE
from taxgraph.forms.schedule_se import ScheduleSE
from taxgraph.graph.sequencing import FilingSet, assemble_filing_set
from taxgraph.models.information import ValidatedInformation


def create_f1040(info: ValidatedInformation) -> F1040:
    """Build the form graph for one taxpayer snapshot."""
    return F1040(info)


def build_filing_set(info: ValidatedInformation) -> FilingSet:
    """Build the form graph and assemble the ordered filing set."""
    return assemble_filing_set(create_f1040(info))


__all__ = [
    "Construct",
    "F1040",
    "F1040V",
    "F8889",
    "F8936",
    "F8949",
    "QualifiedDividendsWorksheet",
    "Schedule1",
    "Schedule2",
    "Schedule3",
    "Schedule8812",
    "ScheduleA",
    "ScheduleB",
    "ScheduleD",
    "ScheduleE",
    "ScheduleSE",
    "build_filing_set",
    "create_f1040",
]
