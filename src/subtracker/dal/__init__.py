"""
Data Access Layer (DAL) for the subscription tracker.

Defines the adapter contracts the services depend on. The concrete
implementations talk to Amazon Cognito (``cognito_handler``) and Amazon
DynamoDB (``dynamodb_handler``); tests substitute in-memory fakes.
"""

from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from subtracker.dal.cognito_handler import AccountStatus, AuthTokens, IdentityProviderError


@runtime_checkable
class IdentityHandler(Protocol):
    """Contract of the external identity provider."""

    def create_account(self, email: str, password: str, attributes: Mapping[str, str]) -> str:
        ...

    def admin_confirm_account(self, email: str) -> None:
        ...

    def confirm_account(self, email: str, code: str) -> None:
        ...

    def resend_confirmation(self, email: str) -> None:
        ...

    def authenticate(self, email: str, password: str) -> Optional[AuthTokens]:
        ...

    def get_account_status(self, email: str) -> AccountStatus:
        ...

    def change_password(self, access_token: str, old_password: str, new_password: str) -> None:
        ...

    def update_attributes(self, email: str, attributes: Mapping[str, str]) -> None:
        ...


@runtime_checkable
class RecordStore(Protocol):
    """Contract of a keyed record store table."""

    table_name: str

    def get_item(self, key: Dict[str, Any], consistent_read: bool = False) -> Optional[Dict[str, Any]]:
        ...

    def put_item(self, item: Dict[str, Any], condition_expression: Optional[Any] = None) -> Dict[str, Any]:
        ...

    def update_item(self, key: Dict[str, Any], updates: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def delete_item(self, key: Dict[str, Any]) -> bool:
        ...

    def query_all_items(
        self,
        key_condition: Any,
        index_name: Optional[str] = None,
        filter_expression: Optional[Any] = None,
    ) -> List[Dict[str, Any]]:
        ...


__all__ = [
    'AccountStatus',
    'AuthTokens',
    'IdentityHandler',
    'IdentityProviderError',
    'RecordStore',
]
