"""Pydantic v2 validation model for superchat records."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SuperchatRecord(BaseModel):
    """One normalized superchat. Immutable once validated."""

    model_config = ConfigDict(frozen=True)

    original_value_text: str = Field(min_length=1)  # as displayed, any currency
    yen_value: float = Field(ge=0)
    user: str = Field(min_length=1)
    comment: str

    @field_validator("user")
    @classmethod
    def validate_user(cls, v: str) -> str:
        """User must not be whitespace only."""
        if not v.strip():
            raise ValueError("user must not be blank")
        return v
