"""Invoice data models shared by booking and membership invoices."""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class InvoiceCustomer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = "Guest"
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    organization: Optional[str] = None


class InvoiceServiceInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    category: Optional[str] = None
    provider_name: Optional[str] = Field(default=None, alias="providerName")
    location: Optional[str] = None


class InvoicePlan(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    type: Optional[str] = None
    period: Optional[str] = None


class InvoiceAmount(BaseModel):
    subtotal: float
    tax: float = 0.0
    total: float
    currency: str = "ETB"


class InvoicePayment(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: str
    method: Optional[str] = None
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")
    paid_at: Optional[datetime] = Field(default=None, alias="paidAt")


class InvoiceDates(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")


class Invoice(BaseModel):
    """
    Derived, non-authoritative invoice view.

    Booking invoices carry a ``service`` snapshot; membership invoices
    (fetched from the server) carry a ``plan`` snapshot instead.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    invoice_number: Optional[str] = Field(default=None, alias="invoiceNumber")
    issued_at: datetime = Field(validation_alias=AliasChoices("date", "issuedAt", "issued_at"))
    booking_id: Optional[str] = Field(default=None, alias="bookingId")
    membership_id: Optional[str] = Field(default=None, alias="membershipId")
    customer: InvoiceCustomer
    service: Optional[InvoiceServiceInfo] = None
    plan: Optional[InvoicePlan] = None
    amount: InvoiceAmount
    payment: InvoicePayment
    dates: Optional[InvoiceDates] = None

    @property
    def reference(self) -> str:
        """Stable label for file names when no invoice number was issued yet."""
        return self.invoice_number or self.booking_id or self.membership_id or "draft"
