"""
Stripe API client wrapper
"""
import stripe
from django.conf import settings
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)

# Configure Stripe
stripe.api_key = settings.STRIPE_SECRET_KEY
# Every gateway call is bounded; a timeout surfaces as a StripeError
stripe.max_network_retries = 0
stripe.default_http_client = stripe.RequestsClient(
    timeout=getattr(settings, 'STRIPE_TIMEOUT_SECONDS', 10)
)


class StripeClient:
    """
    Wrapper for Stripe API client
    """

    @staticmethod
    def create_payment_intent(
        amount: int,
        currency: str = None,
        customer_email: str = None,
        metadata: Dict[str, Any] = None,
        idempotency_key: str = None
    ) -> stripe.PaymentIntent:
        """
        Create a payment intent

        Args:
            amount: Amount in cents
            currency: Currency code (defaults to STRIPE_CURRENCY)
            customer_email: Receipt email for the payer
            metadata: Additional metadata, echoed back on webhook events
            idempotency_key: Stripe idempotency key for safe client retries

        Returns:
            Stripe PaymentIntent object

        Raises:
            stripe.StripeError: On gateway errors and timeouts
        """
        params = {
            'amount': amount,
            'currency': currency or settings.STRIPE_CURRENCY,
            'metadata': metadata or {},
            'automatic_payment_methods': {'enabled': True},
        }

        if customer_email:
            params['receipt_email'] = customer_email
        if idempotency_key:
            params['idempotency_key'] = idempotency_key

        try:
            return stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Error creating payment intent: {str(e)}")
            raise

    @staticmethod
    def cancel_payment_intent(intent_id: str) -> stripe.PaymentIntent:
        """
        Cancel a payment intent that will no longer be used

        Raises:
            stripe.StripeError: On gateway errors, including intents that
                already succeeded or were canceled
        """
        try:
            return stripe.PaymentIntent.cancel(intent_id)
        except stripe.StripeError as e:
            logger.error(f"Error canceling payment intent {intent_id}: {str(e)}")
            raise

    @staticmethod
    def verify_webhook_signature(payload: bytes, signature: str, webhook_secret: str = None):
        """
        Verify Stripe webhook signature.

        Args:
            payload: Raw request body (bytes)
            signature: Stripe-Signature header value
            webhook_secret: Webhook signing secret

        Returns:
            Stripe Event object if valid

        Raises:
            stripe.SignatureVerificationError: If signature is invalid
            ValueError: If the payload is not valid JSON
        """
        if not webhook_secret:
            webhook_secret = settings.STRIPE_WEBHOOK_SECRET

        return stripe.Webhook.construct_event(
            payload, signature, webhook_secret
        )


# Singleton instance
stripe_client = StripeClient()
