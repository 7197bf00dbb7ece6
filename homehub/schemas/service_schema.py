"""Service listing and special offer data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class PriceType(str, Enum):
    FIXED = "fixed"
    HOURLY = "hourly"
    PER_SQFT = "per_sqft"
    CUSTOM = "custom"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def _ref_id(value: Any) -> Any:
    """Collapse a populated reference ({"_id": ..., ...}) to its id."""
    if isinstance(value, dict):
        return value.get("_id") or value.get("id")
    return value


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Service(BaseModel):
    """A bookable listing owned by a provider."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str = Field(default="", validation_alias=AliasChoices("title", "name"))
    description: str = ""
    category: Optional[str] = None
    subcategory: Optional[str] = None
    price: float = 0.0
    price_type: PriceType = Field(default=PriceType.FIXED, alias="priceType")
    photos: list[str] = Field(default_factory=list)
    provider_id: Optional[str] = Field(default=None, alias="providerId")
    provider_name: Optional[str] = Field(default=None, alias="providerName")
    is_available: bool = Field(default=True, alias="isAvailable")
    location: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @model_validator(mode="before")
    @classmethod
    def _flatten_populated(cls, data: Any) -> Any:
        # The server populates provider/category as sub-documents on some routes.
        if not isinstance(data, dict):
            return data
        data = dict(data)
        provider = data.pop("provider", None)
        if isinstance(provider, dict):
            data.setdefault("providerId", provider.get("_id") or provider.get("id"))
            data.setdefault("providerName", provider.get("name") or provider.get("companyName"))
        elif isinstance(provider, str):
            data.setdefault("providerId", provider)
        category = data.get("category")
        if isinstance(category, dict):
            data["category"] = category.get("name")
        return data


class SpecialOffer(BaseModel):
    """A provider discount attached to a single service."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    service_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("service", "service_id", "serviceId")
    )
    title: str = ""
    discount_type: DiscountType = Field(alias="discountType")
    discount_value: float = Field(alias="discountValue", ge=0)
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    is_active: bool = Field(default=True, alias="isActive")
    max_uses: Optional[int] = Field(default=None, alias="maxUses")
    current_uses: int = Field(default=0, alias="currentUses")

    @field_validator("service_id", mode="before")
    @classmethod
    def _collapse_service(cls, value: Any) -> Any:
        return _ref_id(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def can_be_used(self, now: datetime) -> bool:
        """Active, inside its date window, and below its use cap."""
        if not self.is_active:
            return False
        if self.start_date is not None and now < self.start_date:
            return False
        if self.end_date is not None and now > self.end_date:
            return False
        if self.max_uses is not None and self.current_uses >= self.max_uses:
            return False
        return True
