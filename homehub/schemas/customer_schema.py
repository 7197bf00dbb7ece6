"""Customer contact data and resolved booking identity."""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

CONTACT_FIELDS = ("full_name", "email", "phone", "address")


class ContactDetails(BaseModel):
    """Canonical contact tuple; also the wire shape of a booking's guestInfo."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    full_name: str = Field(default="", alias="fullName")
    email: str = ""
    phone: str = ""
    address: str = ""

    @model_validator(mode="before")
    @classmethod
    def _none_to_empty(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: ("" if v is None else v) for k, v in data.items()}
        return data

    def missing_fields(self) -> list[str]:
        """Names of fields that are empty after trimming."""
        return [name for name in CONTACT_FIELDS if not getattr(self, name).strip()]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def is_empty(self) -> bool:
        return len(self.missing_fields()) == len(CONTACT_FIELDS)

    def stripped(self) -> "ContactDetails":
        return ContactDetails(
            full_name=self.full_name.strip(),
            email=self.email.strip(),
            phone=self.phone.strip(),
            address=self.address.strip(),
        )


class UserProfile(BaseModel):
    """Account profile returned by the user service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Optional[str] = None

    def to_contact(self) -> ContactDetails:
        return ContactDetails(
            full_name=self.name or "",
            email=self.email or "",
            phone=self.phone or "",
            address=self.address or "",
        )


@dataclass
class ResolvedIdentity:
    """
    Who is booking: an authenticated user or a guest.

    For guests, ``contact`` is whatever the caller typed in and may be
    incomplete; the request builder rejects incomplete guest contact.
    """

    contact: ContactDetails
    is_authenticated: bool = False
    user: Optional[UserProfile] = None
