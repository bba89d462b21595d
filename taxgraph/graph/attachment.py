"""Base class for attachments owned by a Form 1040 root."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from taxgraph.core.exceptions import MissingDependencyError
from taxgraph.graph.node import FormNode

if TYPE_CHECKING:
    from taxgraph.forms.f1040 import F1040


class F1040Attachment(FormNode):
    """A form attached to a Form 1040.

    ``depends_on`` lists the sibling attributes on the root that must exist
    before this attachment is constructed. The root checks the declaration
    while it builds its catalog; a standalone constructor call checks it
    here, against whatever the root has built so far.

    Attributes:
        f1040: The owning return.
    """

    depends_on: ClassVar[tuple[str, ...]] = ()

    def __init__(self, f1040: F1040, copy_index: int = 0) -> None:
        for dependency in self.depends_on:
            if getattr(f1040, dependency, None) is None:
                raise MissingDependencyError(type(self).__name__, dependency)
        super().__init__(f1040.info, copy_index)
        self.f1040 = f1040
