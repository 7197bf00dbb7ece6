"""Booking data models: creation and update requests, and the Booking entity."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from homehub.schemas.customer_schema import ContactDetails, UserProfile
from homehub.schemas.service_schema import Service


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class BookingCreateRequest(BaseModel):
    """Validated body for ``POST /bookings``."""

    model_config = ConfigDict(populate_by_name=True)

    service: str
    date: str
    note: str = ""
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH, alias="paymentMethod")
    referral_code: Optional[str] = Field(default=None, alias="referralCode")
    guest_info: Optional[ContactDetails] = Field(default=None, alias="guestInfo")

    def to_payload(self) -> dict[str, Any]:
        """Wire body; absent referral code and guest info are omitted, never sent empty."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BookingUpdateRequest(BaseModel):
    """Body for ``PUT /bookings/:id``; the service id is always re-supplied."""

    model_config = ConfigDict(populate_by_name=True)

    service: str
    status: Optional[BookingStatus] = None
    note: Optional[str] = None
    date: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Booking(BaseModel):
    """
    A booking as returned by the server, merged with locally known data.

    Exactly one of ``user`` and ``guest_info`` is populated.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    service: Union[Service, str]
    user: Optional[Union[UserProfile, str]] = None
    guest_info: Optional[ContactDetails] = Field(default=None, alias="guestInfo")
    date: Optional[datetime] = None
    note: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH, alias="paymentMethod")
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, alias="paymentStatus")
    referral_code: Optional[str] = Field(default=None, alias="referralCode")
    amount: Optional[float] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_guest_info(cls, data: Any) -> Any:
        # Mongo echoes an empty guestInfo object on authenticated bookings.
        if isinstance(data, dict):
            guest = data.get("guestInfo", data.get("guest_info"))
            if isinstance(guest, dict) and not any(guest.values()):
                data = {k: v for k, v in data.items() if k not in ("guestInfo", "guest_info")}
        return data

    @model_validator(mode="after")
    def _exactly_one_identity(self) -> "Booking":
        if (self.user is None) == (self.guest_info is None):
            raise ValueError("booking must have exactly one of user or guestInfo")
        return self

    @property
    def service_id(self) -> str:
        return self.service.id if isinstance(self.service, Service) else self.service

    @property
    def is_guest(self) -> bool:
        return self.user is None
