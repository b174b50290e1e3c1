"""
Billing email intake.

Outline of price change detection from subscription emails. Extracting
billing details from an email is not implemented, so ``parse_email`` never
yields data; ``apply_billing_update`` holds the detection logic that runs
once it does.
"""

from typing import Any, Dict, Optional

from boto3.dynamodb.conditions import Attr, Key

from subtracker.dal import RecordStore
from subtracker.handlers.utils.observability import count_metric, logger, tracer
from subtracker.logic.subscription_service import USER_INDEX
from subtracker.models.input import EmailData
from subtracker.models.output import EmailProcessingOutput
from subtracker.models.subscription import PriceChange, Subscription, to_decimal


class EmailProcessor:
    """Detects price changes in billing emails and records them."""

    def __init__(self, subscriptions: RecordStore, price_changes: RecordStore):
        self.subscriptions = subscriptions
        self.price_changes = price_changes

    def parse_email(self, event: Dict[str, Any]) -> Optional[EmailData]:
        logger.info("Email content extraction is not implemented", extra={
            "event_keys": sorted(event) if isinstance(event, dict) else [],
        })
        return None

    @tracer.capture_method
    def apply_billing_update(self, email_data: EmailData) -> Optional[PriceChange]:
        """
        Compare the emailed amount with the matching subscription.

        The first subscription of the user whose name contains the merchant
        is used. On a different amount a price change entry is logged and the
        subscription amount updated.

        Returns:
            The logged price change, or None when nothing changed
        """
        matches = self.subscriptions.query_all_items(
            key_condition=Key('user_id').eq(email_data.user_id),
            index_name=USER_INDEX,
            filter_expression=Attr('name').contains(email_data.merchant),
        )
        if not matches:
            logger.info("No subscription matches merchant", extra={"merchant": email_data.merchant})
            return None

        subscription = matches[0]
        current_amount = float(subscription['amount'])
        if current_amount == email_data.amount:
            return None

        logger.info("Price change detected", extra={
            "subscription_id": subscription['id'],
            "merchant": email_data.merchant,
            "old_price": current_amount,
            "new_price": email_data.amount,
        })

        change = PriceChange.create(
            subscription_id=subscription['id'],
            old_price=current_amount,
            new_price=email_data.amount,
        )
        self.price_changes.put_item(change.to_item())
        self.subscriptions.update_item(
            Subscription.key_for(subscription['id'], email_data.user_id),
            {'amount': to_decimal(email_data.amount)},
        )

        count_metric("PriceChangeDetected")
        return change

    @tracer.capture_method
    def process(self, event: Dict[str, Any]) -> EmailProcessingOutput:
        email_data = self.parse_email(event)
        if email_data is not None:
            self.apply_billing_update(email_data)
        return EmailProcessingOutput(message='Email processing completed')
