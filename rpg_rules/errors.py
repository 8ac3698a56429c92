"""
Error types shared across the rules engine.

MissingReferenceError and InvalidChoiceError cross package boundaries (the
calculator, strategies, equipment and progression all raise or catch them),
so they live here rather than in any one subsystem. Errors that belong to a
single subsystem are defined beside the code that raises them.
"""

from typing import Optional


class MissingReferenceError(KeyError):
    """An identifier did not resolve against the rules dataset."""

    def __init__(self, kind: str, key: Optional[str]):
        self.kind = kind
        self.key = key
        super().__init__(f"Unknown {kind}: {key!r}")

    def __str__(self) -> str:
        return f"Unknown {self.kind}: {self.key!r}"


class InvalidChoiceError(ValueError):
    """A selection violates a cardinality, cap or eligibility rule."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid choice")
