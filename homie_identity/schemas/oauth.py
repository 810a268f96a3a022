"""OAuth provider profile schema."""
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field

from .common import BaseSchema


class OAuthProfile(BaseSchema):
    """Identity asserted by an external provider, validated before linking."""

    provider: str = Field(..., min_length=1, description="Provider name, e.g. google")
    email: Optional[EmailStr] = Field(None, description="Primary email")
    given_name: Optional[str] = Field(None, max_length=100)
    family_name: Optional[str] = Field(None, max_length=100)
    display_name: Optional[str] = Field(None, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=1024)

    @classmethod
    def from_provider_payload(cls, provider: str, payload: Dict[str, Any]) -> "OAuthProfile":
        """Build from a passport-style profile (``emails``, ``name``, ``photos`` lists)."""
        emails = payload.get("emails") or []
        photos = payload.get("photos") or []
        name = payload.get("name") or {}
        return cls(
            provider=provider,
            email=emails[0].get("value") if emails else None,
            given_name=name.get("givenName") or None,
            family_name=name.get("familyName") or None,
            display_name=payload.get("displayName") or None,
            photo_url=photos[0].get("value") if photos else None,
        )
