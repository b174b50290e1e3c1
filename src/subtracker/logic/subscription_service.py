"""
Subscription business logic.

Every read and write is keyed with both the subscription id and the caller's
user id taken from the authorizer claims, so a caller can never see or
modify another user's subscription: a foreign id simply does not exist.
"""

from typing import Any, Dict, List, Mapping, Optional

from boto3.dynamodb.conditions import Key

from subtracker.dal import RecordStore
from subtracker.handlers.utils.errors import NotFoundError, ValidationError
from subtracker.handlers.utils.observability import count_metric, logger, tracer
from subtracker.logic.validation import coerce_amount, require_field_types, require_fields
from subtracker.models.output import DeleteSubscriptionOutput
from subtracker.models.subscription import UPDATABLE_FIELDS, Subscription, to_attribute, to_decimal

USER_INDEX = 'UserIndex'
SUBSCRIPTION_NOT_FOUND = 'Subscription not found'

REQUIRED_FIELDS = {
    'name': str,
    'amount': (int, float, str),
    'billing_cycle': str,
    'next_billing_date': (str, int, float),
}

# Types a partial update may supply for each updatable attribute
UPDATE_FIELD_TYPES = {
    'name': str,
    'amount': (int, float, str),
    'billing_cycle': str,
    'next_billing_date': (str, int, float),
    'category': str,
    'description': str,
    'is_active': bool,
}


def to_response(item: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert a stored item (Decimal amounts) to its API representation."""
    return Subscription.model_validate(dict(item)).model_dump()


class SubscriptionService:
    """CRUD over the caller's subscriptions."""

    def __init__(self, subscriptions: RecordStore):
        self.subscriptions = subscriptions

    @tracer.capture_method
    def create(self, user_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        require_fields(payload, REQUIRED_FIELDS, 'Missing required fields')

        subscription = Subscription.create(
            user_id=user_id,
            name=payload['name'],
            amount=coerce_amount(payload['amount']),
            billing_cycle=payload['billing_cycle'],
            next_billing_date=payload['next_billing_date'],
            category=payload.get('category'),
            description=payload.get('description'),
        )
        self.subscriptions.put_item(subscription.to_item())

        count_metric("SubscriptionCreated")
        logger.info("Subscription created", extra={
            "subscription_id": subscription.id,
            "user_id": user_id,
        })
        return subscription.model_dump()

    @tracer.capture_method
    def list_all(self, user_id: str) -> List[Dict[str, Any]]:
        """Return every subscription of the caller, across all result pages."""
        items = self.subscriptions.query_all_items(
            key_condition=Key('user_id').eq(user_id),
            index_name=USER_INDEX,
        )
        logger.info("Subscriptions listed", extra={"user_id": user_id, "count": len(items)})
        return [to_response(item) for item in items]

    def _require_owned(self, user_id: str, subscription_id: Optional[str]) -> Dict[str, str]:
        """Return the composite key of an existing subscription owned by the caller."""
        if not subscription_id:
            raise ValidationError(error='Missing required parameters', field='id')

        key = Subscription.key_for(subscription_id, user_id)
        if self.subscriptions.get_item(key) is None:
            raise NotFoundError(error=SUBSCRIPTION_NOT_FOUND)
        return key

    @tracer.capture_method
    def update(self, user_id: str, subscription_id: Optional[str], payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update.

        Only supplied fields change; ``None`` leaves a field untouched and
        ``updated_at`` advances on every call. Field types are checked before
        the record is read or written.
        """
        if not subscription_id:
            raise ValidationError(error='Missing required parameters', field='id')
        require_field_types(payload, UPDATE_FIELD_TYPES)

        updates = {field: to_attribute(payload[field]) for field in UPDATABLE_FIELDS if payload.get(field) is not None}
        if 'amount' in updates:
            updates['amount'] = to_decimal(coerce_amount(payload['amount']))

        key = self._require_owned(user_id, subscription_id)
        attributes = self.subscriptions.update_item(key, updates)

        count_metric("SubscriptionUpdated")
        logger.info("Subscription updated", extra={
            "subscription_id": subscription_id,
            "updated_fields": sorted(updates),
        })
        return to_response(attributes or {})

    @tracer.capture_method
    def delete(self, user_id: str, subscription_id: Optional[str]) -> DeleteSubscriptionOutput:
        key = self._require_owned(user_id, subscription_id)
        self.subscriptions.delete_item(key)

        count_metric("SubscriptionDeleted")
        logger.info("Subscription deleted", extra={"subscription_id": subscription_id})
        return DeleteSubscriptionOutput(message='Subscription deleted successfully', id=subscription_id)
