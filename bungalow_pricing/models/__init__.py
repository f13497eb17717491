"""ORM models package export."""

from bungalow_pricing.models.bungalow import Bungalow, BungalowStatus
from bungalow_pricing.models.pricing import (
    AmountType,
    ExtraChargeType,
    ExtraService,
    PriceRule,
    PriceRuleKind,
    RuleScope,
)
from bungalow_pricing.models.reservation import (
    BLOCKING_STATUSES,
    Reservation,
    ReservationStatus,
)

__all__ = [
    "AmountType",
    "BLOCKING_STATUSES",
    "Bungalow",
    "BungalowStatus",
    "ExtraChargeType",
    "ExtraService",
    "PriceRule",
    "PriceRuleKind",
    "Reservation",
    "ReservationStatus",
    "RuleScope",
]
