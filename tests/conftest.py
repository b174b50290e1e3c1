"""
Pytest configuration and shared fixtures for the subscription tracker.

This module provides common test fixtures and configuration used across
unit and integration tests: moto-backed DynamoDB tables, an in-memory
identity provider and API Gateway event builders.
"""

import json
import os
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

# Powertools and the env model read these at import time
os.environ.update({
    "AWS_DEFAULT_REGION": "us-east-1",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "test",
    "AWS_SECRET_ACCESS_KEY": "test",
    "USER_POOL_ID": "us-east-1_TestPool",
    "USER_POOL_CLIENT_ID": "test-client-id",
    "USERS_TABLE": "test-users-table",
    "SUBSCRIPTIONS_TABLE": "test-subscriptions-table",
    "ENVIRONMENT": "test",
    "POWERTOOLS_SERVICE_NAME": "test-subscription-tracker",
    "POWERTOOLS_METRICS_NAMESPACE": "TestSubscriptionTracker",
    "LOG_LEVEL": "DEBUG",
    "POWERTOOLS_TRACE_DISABLED": "true",  # Disable X-Ray in tests
})

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from subtracker.dal import AccountStatus, AuthTokens, IdentityProviderError
from subtracker.dal.cognito_handler import CONFIRMED_STATUS
from subtracker.dal.dynamodb_handler import DynamoDBHandler
from subtracker.handlers.utils.dependencies import Dependencies

USERS_TABLE = "test-users-table"
SUBSCRIPTIONS_TABLE = "test-subscriptions-table"
CHANGES_TABLE = f"{SUBSCRIPTIONS_TABLE}-changes"

TEST_USER_ID = "11111111-aaaa-4bbb-8ccc-000000000001"
TEST_EMAIL = "ann@example.com"
OTHER_USER_ID = "22222222-aaaa-4bbb-8ccc-000000000002"

VALID_CODE = "123456"


class FakeIdentityHandler:
    """In-memory stand-in for the Cognito user pool adapter."""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[str, IdentityProviderError] = {}
        self.calls: List[str] = []

    def fail(self, method: str, identifier: str, message: str = "") -> None:
        """Make the next calls of ``method`` raise the given provider error."""
        self.failures[method] = IdentityProviderError(identifier, message or f"{identifier} raised")

    def add_account(
        self,
        email: str,
        password: str = "Abc12345!",
        status: str = CONFIRMED_STATUS,
        email_verified: bool = True,
        name: str = "Ann",
    ) -> str:
        sub = f"sub-{len(self.accounts) + 1}"
        self.accounts[email] = {
            "sub": sub,
            "password": password,
            "status": status,
            "attributes": {
                "email": email,
                "name": name,
                "email_verified": "true" if email_verified else "false",
            },
        }
        return sub

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]

    def _account(self, email: str) -> Dict[str, Any]:
        if email not in self.accounts:
            raise IdentityProviderError("UserNotFoundException", "User does not exist.")
        return self.accounts[email]

    def create_account(self, email, password, attributes) -> str:
        self._enter("create_account")
        if email in self.accounts:
            raise IdentityProviderError("UsernameExistsException", "An account with the given email already exists.")
        return self.add_account(
            email,
            password=password,
            status="UNCONFIRMED",
            email_verified=False,
            name=attributes.get("name", ""),
        )

    def admin_confirm_account(self, email) -> None:
        self._enter("admin_confirm_account")
        self._account(email)["status"] = CONFIRMED_STATUS

    def confirm_account(self, email, code) -> None:
        self._enter("confirm_account")
        account = self._account(email)
        if account["status"] == CONFIRMED_STATUS:
            raise IdentityProviderError(
                "NotAuthorizedException", "User cannot be confirmed. Current status is CONFIRMED"
            )
        if code != VALID_CODE:
            raise IdentityProviderError("CodeMismatchException", "Invalid verification code provided.")
        account["status"] = CONFIRMED_STATUS

    def resend_confirmation(self, email) -> None:
        self._enter("resend_confirmation")
        if self._account(email)["status"] == CONFIRMED_STATUS:
            raise IdentityProviderError("InvalidParameterException", "User is already confirmed.")

    def authenticate(self, email, password) -> Optional[AuthTokens]:
        self._enter("authenticate")
        account = self._account(email)
        if account["password"] != password:
            raise IdentityProviderError("NotAuthorizedException", "Incorrect username or password.")
        sub = account["sub"]
        return AuthTokens(access_token=f"access-{sub}", id_token=f"id-{sub}", refresh_token=f"refresh-{sub}")

    def get_account_status(self, email) -> AccountStatus:
        self._enter("get_account_status")
        account = self._account(email)
        return AccountStatus(status=account["status"], attributes=dict(account["attributes"]))

    def change_password(self, access_token, old_password, new_password) -> None:
        self._enter("change_password")
        for account in self.accounts.values():
            if access_token == f"access-{account['sub']}":
                if account["password"] != old_password:
                    raise IdentityProviderError("NotAuthorizedException", "Incorrect username or password.")
                account["password"] = new_password
                return
        raise IdentityProviderError("NotAuthorizedException", "Invalid Access Token")

    def update_attributes(self, email, attributes) -> None:
        self._enter("update_attributes")
        self._account(email)["attributes"].update(attributes)


# DynamoDB fixtures
@pytest.fixture
def dynamodb_tables():
    """Create the mock users, subscriptions and price change tables."""
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        users = dynamodb.create_table(
            TableName=USERS_TABLE,
            KeySchema=[{"AttributeName": "email", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "email", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )

        subscriptions = dynamodb.create_table(
            TableName=SUBSCRIPTIONS_TABLE,
            KeySchema=[
                {"AttributeName": "id", "KeyType": "HASH"},
                {"AttributeName": "user_id", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "id", "AttributeType": "S"},
                {"AttributeName": "user_id", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "UserIndex",
                    "KeySchema": [{"AttributeName": "user_id", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        changes = dynamodb.create_table(
            TableName=CHANGES_TABLE,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )

        for table in (users, subscriptions, changes):
            table.wait_until_exists()

        yield {"users": users, "subscriptions": subscriptions, "changes": changes}


@pytest.fixture
def identity() -> FakeIdentityHandler:
    return FakeIdentityHandler()


@pytest.fixture
def deps(dynamodb_tables, identity) -> Dependencies:
    """Handler dependencies backed by moto tables and the fake identity provider."""
    return Dependencies(
        identity=identity,
        users=DynamoDBHandler(USERS_TABLE, region_name="us-east-1"),
        subscriptions=DynamoDBHandler(SUBSCRIPTIONS_TABLE, region_name="us-east-1"),
        price_changes=DynamoDBHandler(CHANGES_TABLE, region_name="us-east-1"),
        auto_confirm_signups=False,
    )


# Sample data fixtures
@pytest.fixture
def stored_user(deps) -> Dict[str, Any]:
    """A confirmed account with a users table record."""
    sub = deps.identity.add_account(TEST_EMAIL)
    item = {
        "id": "user-record-1",
        "email": TEST_EMAIL,
        "name": "Ann",
        "cognito_sub": sub,
        "email_verified": True,
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
    }
    deps.users.put_item(item)
    return item


@pytest.fixture
def sample_subscription_data() -> Dict[str, Any]:
    """Sample subscription body for request testing."""
    return {
        "name": "Netflix Premium",
        "amount": "15.49",
        "billing_cycle": "monthly",
        "next_billing_date": "2024-02-01",
        "category": "Streaming",
    }


@pytest.fixture
def make_event():
    """Build API Gateway REST proxy events."""

    def build(
        body: Any = None,
        claims: Optional[Dict[str, str]] = None,
        path_parameters: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        authorized: bool = True,
    ) -> Dict[str, Any]:
        request_context: Dict[str, Any] = {
            "requestId": "test-request-id-123",
            "accountId": "123456789012",
            "stage": "test",
        }
        if authorized:
            request_context["authorizer"] = {
                "claims": claims if claims is not None else {"sub": TEST_USER_ID, "email": TEST_EMAIL},
            }

        return {
            "headers": headers or {"Content-Type": "application/json"},
            "body": body if body is None or isinstance(body, str) else json.dumps(body),
            "requestContext": request_context,
            "pathParameters": path_parameters,
            "queryStringParameters": None,
            "isBase64Encoded": False,
        }

    return build


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context for testing."""
    context = Mock()
    context.function_name = "test-lambda-function"
    context.function_version = "1"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:test-lambda-function"
    context.memory_limit_in_mb = 512
    context.get_remaining_time_in_millis = lambda: 30000
    context.aws_request_id = "test-request-id-123"
    context.log_group_name = "/aws/lambda/test-lambda-function"
    context.log_stream_name = "2024/01/01/[$LATEST]test123"
    return context


# Error simulation fixtures
@pytest.fixture
def client_error():
    """Build botocore ClientErrors for testing error handling."""

    def create_error(error_code: str, message: str = "Test error", operation_name: str = "TestOperation"):
        return ClientError(
            error_response={
                "Error": {
                    "Code": error_code,
                    "Message": message,
                }
            },
            operation_name=operation_name,
        )

    return create_error


def response_body(response: Dict[str, Any]) -> Any:
    return json.loads(response["body"])


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
