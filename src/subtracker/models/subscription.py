"""
Subscription and price change domain models.

Subscriptions are keyed by ``(id, user_id)`` so every lookup carries the
owner. Amounts are floats in the API and ``Decimal`` in DynamoDB, which
rejects Python floats.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field

PRICE_CHANGE_RETENTION_DAYS = 90

# Attributes a client may change through a partial update
UPDATABLE_FIELDS = (
    'name',
    'amount',
    'billing_cycle',
    'next_billing_date',
    'category',
    'description',
    'is_active',
)


def to_decimal(value: float) -> Decimal:
    """Convert a float to a Decimal without binary float artifacts."""
    return Decimal(str(value))


def to_attribute(value: Any) -> Any:
    """Make a client supplied value storable; DynamoDB takes ``Decimal`` in place of float."""
    return to_decimal(value) if isinstance(value, float) else value


class Subscription(BaseModel):
    """A recurring charge tracked for one user."""

    id: Annotated[str, Field(description='Subscription identifier')]

    user_id: Annotated[str, Field(description='Owner subject id from the authorizer claims')]

    name: Annotated[str, Field(
        description='Merchant or service name',
        examples=['Netflix']
    )]

    amount: Annotated[float, Field(
        description='Charge per billing cycle',
        examples=[15.49]
    )]

    billing_cycle: Annotated[str, Field(
        description='Billing cycle label',
        examples=['monthly', 'yearly']
    )]

    next_billing_date: Annotated[Union[str, int, float], Field(
        description='Next charge date, stored as supplied (string or number)',
        examples=['2024-02-01']
    )]

    category: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    created_at: Annotated[str, Field(description='ISO timestamp when the subscription was created')]
    updated_at: Annotated[str, Field(description='ISO timestamp when the subscription was last updated')]

    @classmethod
    def create(
        cls,
        user_id: str,
        name: str,
        amount: float,
        billing_cycle: str,
        next_billing_date: Union[str, int, float],
        category: Optional[str] = None,
        description: Optional[str] = None,
    ) -> 'Subscription':
        now = datetime.now(timezone.utc).isoformat()
        return cls(
            id=str(uuid4()),
            user_id=user_id,
            name=name,
            amount=amount,
            billing_cycle=billing_cycle,
            next_billing_date=next_billing_date,
            category=category or None,
            description=description or None,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def to_item(self) -> Dict[str, Any]:
        item = self.model_dump()
        item['amount'] = to_decimal(self.amount)
        item['next_billing_date'] = to_attribute(self.next_billing_date)
        return item

    @staticmethod
    def key_for(subscription_id: str, user_id: str) -> Dict[str, str]:
        return {'id': subscription_id, 'user_id': user_id}


class PriceChange(BaseModel):
    """Append-only log entry for a detected price change."""

    id: str
    subscription_id: str
    old_price: float
    new_price: float
    detected_at: str
    ttl: Annotated[int, Field(description='Epoch seconds after which DynamoDB expires the entry')]

    @classmethod
    def create(
        cls,
        subscription_id: str,
        old_price: float,
        new_price: float,
        retention_days: int = PRICE_CHANGE_RETENTION_DAYS,
    ) -> 'PriceChange':
        detected = datetime.now(timezone.utc)
        return cls(
            id=str(uuid4()),
            subscription_id=subscription_id,
            old_price=old_price,
            new_price=new_price,
            detected_at=detected.isoformat(),
            ttl=int((detected + timedelta(days=retention_days)).timestamp()),
        )

    def to_item(self) -> Dict[str, Any]:
        item = self.model_dump()
        item['old_price'] = to_decimal(self.old_price)
        item['new_price'] = to_decimal(self.new_price)
        return item
