from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Optional


class SolverSettings(BaseModel):
    """Options handed to every solver session. Cancellation is the solver's job."""
    timeout_ms: Optional[int] = None
    params: Dict[str, Any] = Field(default_factory=dict)


class EncoderSettings(BaseModel):
    validate_model: bool = True
    log_level: str = "WARNING"
    solver: SolverSettings = Field(default_factory=SolverSettings)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return value
