"""Form 1040 dependency graph and what-if scenario engine."""

__version__ = "0.1.0"
