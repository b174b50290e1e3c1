"""
Identity provider adapter backed by Amazon Cognito user pools.

Wraps the ``cognito-idp`` client calls the handlers need. The adapter never
interprets provider failures: every ``ClientError`` is re-raised as an
``IdentityProviderError`` carrying the provider's error code, which the
error translator maps per operation.
"""

import functools
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from subtracker.handlers.utils.observability import count_metric, logger, tracer

CONFIRMED_STATUS = 'CONFIRMED'


class IdentityProviderError(Exception):
    """Raised when a Cognito call fails; ``identifier`` is the provider error code."""

    def __init__(self, identifier: str, message: str = ''):
        super().__init__(f'{identifier}: {message}' if message else identifier)
        self.identifier = identifier
        self.message = message


@dataclass(frozen=True)
class AuthTokens:
    """Tokens issued by a successful password authentication."""

    access_token: str
    id_token: str
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class AccountStatus:
    """Confirmation state and attributes of a user pool account."""

    status: str
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def confirmed(self) -> bool:
        return self.status == CONFIRMED_STATUS

    @property
    def email_verified(self) -> bool:
        return self.attributes.get('email_verified') == 'true'


def _to_attribute_list(attributes: Mapping[str, str]) -> List[Dict[str, str]]:
    return [{'Name': name, 'Value': value} for name, value in attributes.items()]


def handle_cognito_errors(operation: str):
    """Decorator converting botocore failures into ``IdentityProviderError``."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ClientError as e:
                error_code = e.response['Error']['Code']
                count_metric(f"Cognito{operation}Error")
                logger.info(f"Cognito {operation} rejected", extra={
                    "operation": operation,
                    "error_code": error_code,
                })
                raise IdentityProviderError(error_code, e.response['Error'].get('Message', '')) from e
            except BotoCoreError as e:
                count_metric(f"Cognito{operation}Error")
                logger.error(f"Cognito connection error during {operation}", extra={"error": str(e)})
                raise IdentityProviderError(type(e).__name__, str(e)) from e

        return wrapper
    return decorator


class CognitoIdentityHandler:
    """Cognito user pool operations used by the authentication handlers."""

    def __init__(
        self,
        user_pool_id: str,
        client_id: str,
        region_name: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        self.user_pool_id = user_pool_id
        self.client_id = client_id
        self.client = client or boto3.client('cognito-idp', region_name=region_name)

        logger.debug("Cognito identity handler initialized", extra={
            "user_pool_id": user_pool_id,
            "region_name": region_name,
        })

    @tracer.capture_method
    @handle_cognito_errors("SignUp")
    def create_account(self, email: str, password: str, attributes: Mapping[str, str]) -> str:
        """Register an account and return the provider subject id."""
        response = self.client.sign_up(
            ClientId=self.client_id,
            Username=email,
            Password=password,
            UserAttributes=_to_attribute_list(attributes),
        )
        return response['UserSub']

    @tracer.capture_method
    @handle_cognito_errors("AdminConfirmSignUp")
    def admin_confirm_account(self, email: str) -> None:
        self.client.admin_confirm_sign_up(UserPoolId=self.user_pool_id, Username=email)

    @tracer.capture_method
    @handle_cognito_errors("ConfirmSignUp")
    def confirm_account(self, email: str, code: str) -> None:
        self.client.confirm_sign_up(
            ClientId=self.client_id,
            Username=email,
            ConfirmationCode=code,
        )

    @tracer.capture_method
    @handle_cognito_errors("ResendConfirmationCode")
    def resend_confirmation(self, email: str) -> None:
        self.client.resend_confirmation_code(ClientId=self.client_id, Username=email)

    @tracer.capture_method
    @handle_cognito_errors("InitiateAuth")
    def authenticate(self, email: str, password: str) -> Optional[AuthTokens]:
        """
        Run the USER_PASSWORD_AUTH flow.

        Returns:
            Issued tokens, or None when Cognito answers with a challenge instead
        """
        response = self.client.initiate_auth(
            AuthFlow='USER_PASSWORD_AUTH',
            ClientId=self.client_id,
            AuthParameters={'USERNAME': email, 'PASSWORD': password},
        )
        result = response.get('AuthenticationResult')
        if not result:
            logger.info("Authentication returned a challenge", extra={
                "challenge_name": response.get('ChallengeName'),
            })
            return None

        return AuthTokens(
            access_token=result['AccessToken'],
            id_token=result['IdToken'],
            refresh_token=result.get('RefreshToken'),
        )

    @tracer.capture_method
    @handle_cognito_errors("AdminGetUser")
    def get_account_status(self, email: str) -> AccountStatus:
        response = self.client.admin_get_user(UserPoolId=self.user_pool_id, Username=email)
        attributes = {
            attribute['Name']: attribute['Value']
            for attribute in response.get('UserAttributes', [])
        }
        return AccountStatus(status=response.get('UserStatus', 'UNKNOWN'), attributes=attributes)

    @tracer.capture_method
    @handle_cognito_errors("ChangePassword")
    def change_password(self, access_token: str, old_password: str, new_password: str) -> None:
        self.client.change_password(
            AccessToken=access_token,
            PreviousPassword=old_password,
            ProposedPassword=new_password,
        )

    @tracer.capture_method
    @handle_cognito_errors("AdminUpdateUserAttributes")
    def update_attributes(self, email: str, attributes: Mapping[str, str]) -> None:
        self.client.admin_update_user_attributes(
            UserPoolId=self.user_pool_id,
            Username=email,
            UserAttributes=_to_attribute_list(attributes),
        )
