"""
Exceptions raised by the merge engine.
"""

from typing import Optional


class MergeInputError(ValueError):
    """A variant tree is structurally invalid and the merge cannot run."""

    def __init__(self, variant: str, reason: str):
        self.variant = variant
        self.reason = reason
        super().__init__(f"Invalid {variant} tree: {reason}")


class MergeConfigError(ValueError):
    """The merge configuration is inconsistent."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)
