"""
Typed records for the Stripe events the reconciler consumes.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional


def cents_to_decimal(cents) -> Decimal:
    return (Decimal(int(cents or 0)) / Decimal('100')).quantize(Decimal('0.01'))


def decimal_to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal('1')))


@dataclass(frozen=True)
class PaymentIntentMetadata:
    """Metadata attached to every PaymentIntent we create."""
    booking_id: Optional[str] = None
    customer_id: Optional[str] = None
    discount_code: Optional[str] = None
    points_used: int = 0

    @classmethod
    def from_stripe(cls, metadata: Optional[Mapping[str, Any]]) -> 'PaymentIntentMetadata':
        metadata = metadata or {}
        return cls(
            booking_id=metadata.get('booking_id') or None,
            customer_id=metadata.get('customer_id') or None,
            discount_code=metadata.get('discount_code') or None,
            points_used=int(metadata.get('points_used') or 0),
        )

    def to_stripe(self) -> dict:
        return {
            key: value for key, value in (
                ('booking_id', self.booking_id),
                ('customer_id', self.customer_id),
                ('discount_code', self.discount_code),
                ('points_used', str(self.points_used) if self.points_used else None),
            ) if value
        }


@dataclass(frozen=True)
class PaymentIntentEvent:
    """A payment_intent.* webhook event."""
    event_id: str
    event_type: str
    intent_id: str
    amount: Decimal
    currency: str
    failure_message: str
    metadata: PaymentIntentMetadata

    @classmethod
    def from_stripe(cls, event: Mapping[str, Any]) -> 'PaymentIntentEvent':
        """
        Build the record from a verified Stripe event.

        Raises:
            KeyError: The event has no payment intent object
        """
        intent = event['data']['object']
        amount_cents = intent.get('amount_received') or intent.get('amount') or 0
        last_error = intent.get('last_payment_error') or {}

        return cls(
            event_id=event['id'],
            event_type=event['type'],
            intent_id=intent['id'],
            amount=cents_to_decimal(amount_cents),
            currency=intent.get('currency') or '',
            failure_message=last_error.get('message') or '',
            metadata=PaymentIntentMetadata.from_stripe(intent.get('metadata')),
        )
