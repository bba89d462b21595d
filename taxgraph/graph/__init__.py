"""Form dependency graph: nodes, memoized lines, attachments and assembly."""

from taxgraph.graph.attachment import F1040Attachment
from taxgraph.graph.lines import (
    LineCell,
    LineOwner,
    evaluation_depth,
    line,
    positive,
    sum_fields,
    sum_optional,
)
from taxgraph.graph.node import Attachment, FieldValue, FormNode, ReturnRoot
from taxgraph.graph.sequencing import FilingSet, assemble_filing_set

__all__ = [
    "Attachment",
    "F1040Attachment",
    "FieldValue",
    "FilingSet",
    "FormNode",
    "LineCell",
    "LineOwner",
    "ReturnRoot",
    "assemble_filing_set",
    "evaluation_depth",
    "line",
    "positive",
    "sum_fields",
    "sum_optional",
]
