"""
app/flow/plans.py

Purpose: Payment plan pricing

- Full payment: the course fee
- Installment: ceil(fee / 3) per month, fee x 1.1 in total
- Pure functions, no I/O
"""

import math
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

from app.core.exceptions import ValidationError
from utils.constants import (
    INSTALLMENT_MONTHS,
    INSTALLMENT_MULTIPLIER,
    PLAN_FULL_FEATURES,
    PLAN_FULL_NAME,
    PLAN_FULL_SAVINGS,
    PLAN_INSTALLMENT_FEATURES,
    PLAN_INSTALLMENT_NAME,
    PLAN_INSTALLMENT_NOTE,
)
from utils.payment_utils import format_inr


class PaymentPlan(str, Enum):
    FULL = "full"
    INSTALLMENT = "installment"


@dataclass
class PlanQuote:
    """Price of one plan for one course."""
    plan_id: PaymentPlan
    name: str
    price: float
    total: float
    note: Optional[str] = None
    savings: Optional[str] = None
    popular: bool = False
    features: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["plan_id"] = self.plan_id.value
        data["price_display"] = format_inr(self.price)
        data["total_display"] = format_inr(self.total)
        return data


def parse_plan(plan_id: Any) -> PaymentPlan:
    """
    Raises:
        ValidationError: For anything other than 'full' or 'installment'
    """
    try:
        return PaymentPlan(plan_id)
    except ValueError:
        raise ValidationError(
            f"Unknown payment plan: {plan_id}",
            details={"allowed": [plan.value for plan in PaymentPlan]}
        )


def installment_price(fee: float) -> int:
    """Monthly installment, rounded up to the whole rupee."""
    return math.ceil(fee / INSTALLMENT_MONTHS)


def installment_total(fee: float) -> float:
    return fee * INSTALLMENT_MULTIPLIER


def quote_plan(plan_id: Any, fee: float) -> PlanQuote:
    """
    Prices a plan for a course fee.

    Args:
        plan_id: 'full' or 'installment'
        fee: Course fee in rupees

    Returns:
        PlanQuote
    """
    plan = parse_plan(plan_id)

    if plan is PaymentPlan.FULL:
        return PlanQuote(
            plan_id=plan,
            name=PLAN_FULL_NAME,
            price=fee,
            total=fee,
            savings=PLAN_FULL_SAVINGS,
            features=list(PLAN_FULL_FEATURES),
        )

    return PlanQuote(
        plan_id=plan,
        name=PLAN_INSTALLMENT_NAME,
        price=installment_price(fee),
        total=installment_total(fee),
        note=PLAN_INSTALLMENT_NOTE,
        popular=True,
        features=list(PLAN_INSTALLMENT_FEATURES),
    )


def get_plan_quotes(fee: float) -> List[PlanQuote]:
    """All plans for a fee, in display order."""
    return [quote_plan(plan, fee) for plan in PaymentPlan]
