from typing import Any

from pydantic import ConfigDict, Field

from app.schemas.base import CamelModel


class PaymentRecord(CamelModel):
    """Stored payment; created only after a successful verification."""

    id: str
    timestamp: str
    amount: float | None = None
    expected_amount: float
    package_type: str | None = None
    reference: str | None = None
    transfer_timestamp: str | None = None
    verified: bool = True
    verification_data: dict[str, Any] = Field(default_factory=dict)


class PaymentStats(CamelModel):
    total: int = 0
    verified: int = 0
    total_revenue: float = 0
    today_revenue: float = 0


class VerifyPaymentIn(CamelModel):
    model_config = ConfigDict(extra="ignore")

    image: str | None = None  # data URL or bare base64
    expected_amount: float | None = None
    package_type: str | None = None


class VerifyPaymentOut(CamelModel):
    success: bool = True
    verified: bool
    message: str
    payment_id: str | None = None
    verification_data: dict[str, Any] | None = None
    raw_response: str | None = None


class PaymentsListOut(CamelModel):
    success: bool = True
    stats: PaymentStats
    payments: list[PaymentRecord]


class DeletePaymentIn(CamelModel):
    model_config = ConfigDict(extra="ignore")

    payment_id: str | None = None


class MessageOut(CamelModel):
    success: bool = True
    message: str


class ReconcileOut(CamelModel):
    success: bool = True
    before: dict[str, int | float]
    after: dict[str, int | float]
