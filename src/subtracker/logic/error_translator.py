"""
Identity provider error translation.

The same Cognito error code means different things in different flows
(``NotAuthorizedException`` is a wrong password at login, a wrong current
password when changing it, and "already confirmed" during confirmation).
Translations are therefore looked up by ``(operation, error code)``. Codes
without an entry become a 500 carrying the provider message.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Set, Tuple, Type

from subtracker.dal.cognito_handler import IdentityProviderError
from subtracker.handlers.utils.errors import (
    INTERNAL_SERVER_ERROR,
    AuthenticationError,
    BaseServiceError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
    ValidationError,
)
from subtracker.handlers.utils.observability import count_metric, logger


class Operation(str, Enum):
    """Flows that call the identity provider."""
    SIGNUP = "signup"
    CONFIRM = "confirm"
    RESEND_CODE = "resend_code"
    LOGIN = "login"
    CHANGE_PASSWORD = "change_password"


@dataclass(frozen=True)
class Translation:
    """HTTP status and user visible error for one provider error code."""

    status_code: int
    error: str
    include_provider_message: bool = True


TranslationKey = Tuple[Operation, str]

DEFAULT_TRANSLATIONS: Dict[TranslationKey, Translation] = {
    (Operation.CHANGE_PASSWORD, 'NotAuthorizedException'): Translation(400, 'Current password is incorrect', False),
    (Operation.CHANGE_PASSWORD, 'InvalidPasswordException'): Translation(400, 'New password does not meet requirements', False),
    (Operation.CHANGE_PASSWORD, 'LimitExceededException'): Translation(400, 'Too many attempts. Please try again later', False),
    (Operation.CHANGE_PASSWORD, 'InvalidParameterException'): Translation(400, 'Invalid password format', False),

    (Operation.CONFIRM, 'CodeMismatchException'): Translation(400, 'Invalid verification code'),
    (Operation.CONFIRM, 'ExpiredCodeException'): Translation(400, 'Verification code has expired. Please request a new code.'),
    (Operation.CONFIRM, 'UserNotFoundException'): Translation(404, 'User not found'),
    (Operation.CONFIRM, 'LimitExceededException'): Translation(429, 'Too many attempts. Please try again later.'),

    # Unknown users get the same answer as a wrong password
    (Operation.LOGIN, 'NotAuthorizedException'): Translation(401, 'Incorrect email or password'),
    (Operation.LOGIN, 'UserNotFoundException'): Translation(401, 'Incorrect email or password'),
    (Operation.LOGIN, 'UserNotConfirmedException'): Translation(
        403, 'Email not verified. Please check your inbox for the verification code.'
    ),

    (Operation.SIGNUP, 'UsernameExistsException'): Translation(409, 'User already exists'),
    (Operation.SIGNUP, 'InvalidPasswordException'): Translation(400, 'Password does not meet requirements'),

    (Operation.RESEND_CODE, 'UserNotFoundException'): Translation(404, 'User not found'),
    (Operation.RESEND_CODE, 'InvalidParameterException'): Translation(400, 'User is already confirmed'),
    (Operation.RESEND_CODE, 'LimitExceededException'): Translation(429, 'Too many requests. Please try again later'),
}

# Codes that mean the account is already confirmed
DEFAULT_TOLERATED: Dict[Operation, Set[str]] = {
    Operation.CONFIRM: {'NotAuthorizedException', 'AliasExistsException'},
}

ERROR_CLASSES: Dict[int, Type[BaseServiceError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitError,
}


def error_class_for(status_code: int) -> Type[BaseServiceError]:
    return ERROR_CLASSES.get(status_code, UpstreamError)


class ErrorTranslator:
    """Lookup table from ``(operation, provider error code)`` to a service error."""

    def __init__(
        self,
        translations: Optional[Dict[TranslationKey, Translation]] = None,
        tolerated: Optional[Dict[Operation, Iterable[str]]] = None,
    ):
        source = DEFAULT_TRANSLATIONS if translations is None else translations
        self._translations: Dict[TranslationKey, Translation] = dict(source)

        tolerated_source = DEFAULT_TOLERATED if tolerated is None else tolerated
        self._tolerated: Dict[Operation, Set[str]] = {
            operation: set(identifiers) for operation, identifiers in tolerated_source.items()
        }

    def register(
        self,
        operation: Operation,
        identifier: str,
        status_code: int,
        error: str,
        include_provider_message: bool = True,
    ) -> None:
        """Add or replace the translation of one provider error code."""
        self._translations[(operation, identifier)] = Translation(status_code, error, include_provider_message)

    def tolerate(self, operation: Operation, identifier: str) -> None:
        self._tolerated.setdefault(operation, set()).add(identifier)

    def lookup(self, operation: Operation, identifier: str) -> Optional[Translation]:
        return self._translations.get((operation, identifier))

    def is_tolerated(self, operation: Operation, error: IdentityProviderError) -> bool:
        return error.identifier in self._tolerated.get(operation, set())

    def translate(self, operation: Operation, error: IdentityProviderError) -> BaseServiceError:
        """
        Build the service error to raise for a provider failure.

        Args:
            operation: Flow in which the provider call failed
            error: The provider failure

        Returns:
            A ``BaseServiceError`` subclass instance chosen by HTTP status
        """
        provider_message = error.message or error.identifier
        translation = self.lookup(operation, error.identifier)

        if translation is None:
            count_metric("UnmappedProviderError")
            logger.warning("Unmapped identity provider error", extra={
                "operation": operation.value,
                "error_code": error.identifier,
            })
            return UpstreamError(error=INTERNAL_SERVER_ERROR, message=provider_message)

        service_error = error_class_for(translation.status_code)(
            error=translation.error,
            message=provider_message if translation.include_provider_message else None,
        )
        service_error.status_code = translation.status_code
        return service_error


error_translator = ErrorTranslator()
