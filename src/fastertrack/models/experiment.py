"""
Experiment model.

Experiments are fetched once from the gateway and never modified afterwards.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Experiment(BaseModel):
    """An experiment as listed by the gateway."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Experiment identifier")
    name: str = Field(..., description="Experiment name, used in run filter expressions")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Some servers send numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def __str__(self) -> str:
        return f"Experiment(id={self.id}, name={self.name})"
