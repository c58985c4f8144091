"""Exception hierarchy shared by the encoder, the validator and the solver layer."""

from typing import List, Optional


class FmSmtError(Exception):
    """Base class for all fm-smt errors."""


class EncodingError(FmSmtError):
    """A constraint or expression tree cannot be lowered. Aborts the conversion."""


class ModelIntegrityError(FmSmtError, ValueError):
    """The feature model violates a structural invariant and must not be encoded."""

    def __init__(self, message: str, issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues = list(issues) if issues else [message]


class SolverSessionError(FmSmtError):
    """The solver failed or gave up during assert/push/pop/check."""


class ConfigError(FmSmtError):
    """Settings file missing required structure or holding invalid values."""
