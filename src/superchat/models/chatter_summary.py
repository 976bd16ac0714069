"""Pydantic v2 validation model for per-sender aggregates."""

from pydantic import BaseModel, ConfigDict, Field


class ChatterSummary(BaseModel):
    """Superchat count and JPY total for one sender."""

    model_config = ConfigDict(frozen=True)

    user: str = Field(min_length=1)
    superchat_count: int = Field(ge=1)
    total_yen: float = Field(ge=0)
