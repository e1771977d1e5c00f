"""
Database models used for Lazada credential storage, and the credential value object.
"""

import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from lazada_gateway.core.database import Base

CREDENTIAL_ROW_ID = 1


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


class LazadaCredentialRecord(Base):
    """
    Persisted Lazada seller credential. The gateway holds a single row.

    Attributes:
        id (int): Always ``CREDENTIAL_ROW_ID``.
        access_token (str): Token sent as ``access_token`` on authenticated calls.
        refresh_token (str): Token able to mint a new access token.
        expires_at (datetime): Access token expiry, naive UTC.
        refresh_expires_at (datetime): Refresh token expiry, naive UTC.
        account (str): Seller account reported by Lazada, if any.
        country (str): Seller country reported by Lazada, if any.
        created_at (datetime): When the stored credential was issued, naive UTC.
    """

    __tablename__ = "lazada_credentials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    access_token: Mapped[str] = mapped_column(String, nullable=False)
    refresh_token: Mapped[str] = mapped_column(String, nullable=False)
    expires_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    refresh_expires_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)
    account: Mapped[str | None] = mapped_column(String, nullable=True)
    country: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime, server_default=text("CURRENT_TIMESTAMP")
    )


class Credential(BaseModel):
    """
    The gateway's authority to call Lazada on behalf of the connected seller.

    Instances are immutable; a new code exchange produces a full replacement.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_at: datetime.datetime
    refresh_expires_at: datetime.datetime
    account: Optional[str] = None
    country: Optional[str] = None
    created_at: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.UTC)
    )

    @field_validator("expires_at", "refresh_expires_at", "created_at")
    @classmethod
    def _normalize_utc(cls, value: datetime.datetime) -> datetime.datetime:
        return _as_utc(value)

    @classmethod
    def from_record(cls, record: LazadaCredentialRecord) -> "Credential":
        """Build a Credential from its database row."""
        return cls(
            access_token=record.access_token,
            refresh_token=record.refresh_token,
            expires_at=record.expires_at,
            refresh_expires_at=record.refresh_expires_at,
            account=record.account,
            country=record.country,
            created_at=record.created_at,
        )

    def to_record(self) -> LazadaCredentialRecord:
        """Build the database row for this Credential."""
        return LazadaCredentialRecord(
            id=CREDENTIAL_ROW_ID,
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=self.expires_at.replace(tzinfo=None),
            refresh_expires_at=self.refresh_expires_at.replace(tzinfo=None),
            account=self.account,
            country=self.country,
            created_at=self.created_at.replace(tzinfo=None),
        )

    def is_expired(self, now: datetime.datetime) -> bool:
        """Return True once ``now`` has reached the access token expiry."""
        return _as_utc(now) >= self.expires_at
