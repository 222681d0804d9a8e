"""Canonical record and collaborator interfaces shared by all providers."""

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

UNKNOWN_EMAIL = "Unknown"
DEFAULT_FAILURE_REASON = "No failure reason provided"
INITIAL_STATUS = "New"

# Stripe amounts for these currencies are already in major units
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})


class FailedPayment(BaseModel):
    """Canonical failed-payment record, whatever event produced it."""
    payment_id: str = Field(..., min_length=1)
    customer_id: str | None
    customer_email: str
    amount_minor_units: int = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)
    failure_reason: str
    failure_date: datetime

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, v: str) -> str:
        return v.upper()

    @property
    def amount_major_units(self) -> float:
        if self.currency in ZERO_DECIMAL_CURRENCIES:
            return float(self.amount_minor_units)
        return self.amount_minor_units / 100

    @property
    def display_amount(self) -> str:
        if self.currency in ZERO_DECIMAL_CURRENCIES:
            return f"{self.amount_minor_units} {self.currency}"
        return f"{self.amount_minor_units / 100:.2f} {self.currency}"


class CustomerLookup(ABC):
    """Resolves processor customer ids to customer details."""

    @abstractmethod
    async def retrieve_customer(self, customer_id: str) -> dict:
        """Return the customer object. Raises LookupFailed."""
        pass


class Notifier(ABC):
    """Sends an alert for a failed payment."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def notify(self, payment: FailedPayment) -> str:
        """Send the alert and return the transport's message id. Raises NotifierFailed."""
        pass


class Recorder(ABC):
    """Persists a failed payment to an external store."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def record(self, payment: FailedPayment) -> str:
        """Create the record and return its id. Raises RecorderFailed."""
        pass
