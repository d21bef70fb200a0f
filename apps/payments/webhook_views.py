"""
Webhook views for Stripe events.
"""
import logging

import stripe
from django.http import HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from infrastructure.integrations.stripe.client import StripeClient
from .stripe_webhooks import process_stripe_webhook

logger = logging.getLogger(__name__)


@csrf_exempt
@require_http_methods(["POST"])
def stripe_webhook(request):
    """
    Handle incoming Stripe webhooks.

    Verifies the webhook signature, then reconciles the event. Events that
    fail to process answer 500 so Stripe delivers them again.
    """
    payload = request.body
    sig_header = request.META.get('HTTP_STRIPE_SIGNATURE')

    if not sig_header:
        logger.warning("Missing Stripe signature header")
        return HttpResponse("Missing signature", status=400)

    try:
        event = StripeClient.verify_webhook_signature(
            payload=payload,
            signature=sig_header
        )
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning(f"Invalid Stripe webhook: {str(e)}")
        return HttpResponse("Invalid signature", status=400)

    try:
        result = process_stripe_webhook(event)
    except Exception as e:
        logger.error(f"Error processing Stripe webhook {event.get('id')}: {str(e)}", exc_info=True)
        return HttpResponse("Webhook processing failed", status=500)

    return HttpResponse(f"Webhook {result.value}", status=200)
