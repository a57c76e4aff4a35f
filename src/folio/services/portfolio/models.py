"""Data models for the portfolio aggregate."""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Classification(str, Enum):
    """Accounting treatment of a portfolio."""

    TRADING = "TRADING"
    AFS = "AFS"  # available-for-sale
    HTM = "HTM"  # held-to-maturity


class Portfolio(BaseModel):
    """
    Portfolio owned by one user.

    Instances are only built from attributes that already passed
    validate_portfolio(); updates produce a new instance.

    Attributes:
        portfolio_id: Unique identifier
        user_id: Owning user
        name: Display name, unique per user
        classification: TRADING, AFS or HTM
        created_at: Creation time
        updated_at: Last attribute change
    """

    portfolio_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: int
    name: str
    classification: Classification
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Trim and validate name is non-blank."""
        v = v.strip()
        if not v:
            raise ValueError("Portfolio name cannot be blank")
        return v
