"""
Authentication and profile business logic.

Coordinates the identity provider (credentials, confirmation state) with the
users table (profile fields). Every provider failure goes through the error
translator for the flow in which it happened.
"""

from typing import Any, Optional

from subtracker.dal import IdentityHandler, IdentityProviderError, RecordStore
from subtracker.handlers.utils.errors import AuthenticationError, NotFoundError
from subtracker.handlers.utils.observability import count_metric, logger, mask_email, tracer
from subtracker.handlers.utils.request import Principal
from subtracker.logic.error_translator import ErrorTranslator, Operation, error_translator
from subtracker.logic.validation import require_fields, validate_name, validate_password_change
from subtracker.models.output import (
    ChangePasswordOutput,
    ConfirmOutput,
    LoginOutput,
    ProfileOutput,
    ProfileUser,
    ResendCodeOutput,
    SignupOutput,
    UpdateProfileOutput,
    VerifiedEmailOutput,
    VerifiedUser,
)
from subtracker.models.user import User

EMAIL_NOT_VERIFIED = 'Email not verified'
VERIFY_EMAIL_FIRST = 'Please verify your email before logging in. Check your inbox for the verification code.'
EMAIL_VERIFIED = 'Email verified successfully. You can now log in.'
USER_NOT_FOUND = 'User not found'


class AuthService:
    """Signup, confirmation, login, password and profile operations."""

    def __init__(
        self,
        identity: IdentityHandler,
        users: RecordStore,
        auto_confirm_signups: bool = False,
        translator: Optional[ErrorTranslator] = None,
    ):
        self.identity = identity
        self.users = users
        self.auto_confirm_signups = auto_confirm_signups
        self.translator = translator or error_translator

    @tracer.capture_method
    def signup(self, email: Any, password: Any, name: Any) -> SignupOutput:
        """
        Register an account with the identity provider and store the profile.

        Password strength is left to the user pool policy; a rejection comes
        back as ``InvalidPasswordException``. When auto confirmation is on the
        account is confirmed and its email marked verified immediately.
        """
        require_fields(
            {'email': email, 'password': password, 'name': name},
            {'email': str, 'password': str, 'name': str},
            'Email, password, and name are required',
        )

        try:
            cognito_sub = self.identity.create_account(email, password, {'email': email, 'name': name})
            if self.auto_confirm_signups:
                self.identity.admin_confirm_account(email)
                self.identity.update_attributes(email, {'email_verified': 'true'})
        except IdentityProviderError as e:
            raise self.translator.translate(Operation.SIGNUP, e) from e

        user = User.create(
            email=email,
            name=name,
            cognito_sub=cognito_sub,
            email_verified=self.auto_confirm_signups,
        )
        self.users.put_item(user.to_item())

        count_metric("UserSignedUp")
        logger.info("User signed up", extra={
            "user_id": user.id,
            "email": mask_email(email),
            "auto_confirmed": self.auto_confirm_signups,
        })

        message = 'User created successfully'
        if not self.auto_confirm_signups:
            message = 'User created successfully. Please check your email for verification code.'
        return SignupOutput(id=user.id, email=email, name=name, message=message)

    def _is_confirmed(self, email: str) -> bool:
        """Best-effort status lookup; any failure counts as not confirmed."""
        try:
            return self.identity.get_account_status(email).confirmed
        except IdentityProviderError as e:
            logger.info("Account status check failed", extra={
                "email": mask_email(email),
                "error_code": e.identifier,
            })
            return False

    @tracer.capture_method
    def confirm(self, email: Any, code: Any) -> ConfirmOutput | VerifiedEmailOutput:
        """
        Confirm an account and mark its email verified.

        Safe to repeat: an already confirmed account skips the confirm call,
        and the provider codes that mean "already confirmed" are treated as
        success. ``email_verified`` is always written to Cognito, then
        mirrored to the users table when a record exists.
        """
        require_fields(
            {'email': email, 'code': code},
            {'email': str, 'code': str},
            'Email and verification code are required',
        )

        if not self._is_confirmed(email):
            try:
                self.identity.confirm_account(email, code)
            except IdentityProviderError as e:
                if not self.translator.is_tolerated(Operation.CONFIRM, e):
                    raise self.translator.translate(Operation.CONFIRM, e) from e
                logger.info("Account already confirmed", extra={
                    "email": mask_email(email),
                    "error_code": e.identifier,
                })

        try:
            self.identity.update_attributes(email, {'email_verified': 'true'})
        except IdentityProviderError as e:
            raise self.translator.translate(Operation.CONFIRM, e) from e

        count_metric("EmailConfirmed")

        key = User.key_for(email)
        if self.users.get_item(key) is None:
            logger.warning("User record missing after confirmation", extra={"email": mask_email(email)})
            return VerifiedEmailOutput(message=EMAIL_VERIFIED, email=email)

        attributes = self.users.update_item(key, {'email_verified': True}) or {}
        return ConfirmOutput(
            message=EMAIL_VERIFIED,
            user=VerifiedUser(
                id=attributes.get('id'),
                email=attributes.get('email', email),
                name=attributes.get('name'),
                email_verified=attributes.get('email_verified', True),
            ),
        )

    @tracer.capture_method
    def resend_code(self, email: Any) -> ResendCodeOutput:
        require_fields({'email': email}, {'email': str}, 'Email is required')

        try:
            self.identity.resend_confirmation(email)
        except IdentityProviderError as e:
            raise self.translator.translate(Operation.RESEND_CODE, e) from e

        return ResendCodeOutput(message='Verification code resent successfully')

    @tracer.capture_method
    def login(self, email: Any, password: Any) -> LoginOutput:
        """
        Authenticate with email and password.

        The account status is checked before the password so an unverified
        account gets a distinguishable 403 instead of a generic failure.
        """
        require_fields(
            {'email': email, 'password': password},
            {'email': str, 'password': str},
            'Email and password are required',
        )

        try:
            status = self.identity.get_account_status(email)
        except IdentityProviderError as e:
            raise self.translator.translate(Operation.LOGIN, e) from e

        if not status.confirmed or not status.email_verified:
            count_metric("LoginUnverified")
            raise AuthenticationError(error=EMAIL_NOT_VERIFIED, message=VERIFY_EMAIL_FIRST, status_code=403)

        try:
            tokens = self.identity.authenticate(email, password)
        except IdentityProviderError as e:
            raise self.translator.translate(Operation.LOGIN, e) from e

        if tokens is None:
            raise AuthenticationError(error='Authentication failed')

        record = self.users.get_item(User.key_for(email))
        if record is None:
            raise NotFoundError(error=USER_NOT_FOUND)

        count_metric("UserLoggedIn")
        logger.info("User logged in", extra={"user_id": record.get('id')})

        return LoginOutput(
            id=record['id'],
            email=record.get('email', email),
            name=record.get('name'),
            email_verified=record.get('email_verified', True),
            token=tokens.access_token,
            id_token=tokens.id_token,
            refresh_token=tokens.refresh_token,
        )

    @tracer.capture_method
    def change_password(
        self,
        principal: Principal,
        old_password: Any,
        new_password: Any,
        access_token: Optional[str],
    ) -> ChangePasswordOutput:
        validate_password_change(old_password, new_password)

        if not access_token:
            raise AuthenticationError(error='Missing authorization token')

        try:
            self.identity.change_password(access_token, old_password, new_password)
        except IdentityProviderError as e:
            raise self.translator.translate(Operation.CHANGE_PASSWORD, e) from e

        count_metric("PasswordChanged")
        logger.info("Password changed", extra={"user_id": principal.user_id})
        return ChangePasswordOutput(message='Password changed successfully')

    @tracer.capture_method
    def get_profile(self, principal: Principal) -> ProfileOutput:
        record = self.users.get_item(User.key_for(principal.email))
        if record is None:
            raise NotFoundError(error=USER_NOT_FOUND)

        return ProfileOutput(
            id=record['id'],
            email=record['email'],
            name=record.get('name'),
            created_at=record.get('created_at'),
        )

    @tracer.capture_method
    def update_profile(self, principal: Principal, name: Any) -> UpdateProfileOutput:
        """
        Rename the caller.

        The users table is written first. Mirroring the name to Cognito is a
        side effect whose failure is logged and never reaches the caller.
        """
        require_fields({'name': name}, {'name': str}, 'Name is required and must be a string')
        trimmed_name = validate_name(name)

        key = User.key_for(principal.email)
        if self.users.get_item(key) is None:
            raise NotFoundError(error=USER_NOT_FOUND)

        attributes = self.users.update_item(key, {'name': trimmed_name}) or {}

        try:
            self.identity.update_attributes(principal.email, {'name': trimmed_name})
        except IdentityProviderError as e:
            count_metric("ProfileMirrorFailure")
            logger.warning("Failed to mirror profile name to Cognito", extra={
                "user_id": principal.user_id,
                "error_code": e.identifier,
            })

        return UpdateProfileOutput(
            message='Profile updated successfully',
            user=ProfileUser(
                id=attributes.get('id'),
                email=attributes.get('email', principal.email),
                name=attributes.get('name', trimmed_name),
                updated_at=attributes.get('updated_at'),
            ),
        )
