"""
Auth Handler - Lambda functions for account and profile management.

Each use case has a ``handle_*`` pipeline taking the raw API Gateway proxy
event and the injected ``Dependencies``, and a ``*_handler`` Lambda entry
point that wires in the Powertools decorators and the process-wide
dependencies.
"""

from http import HTTPStatus
from typing import Any, Dict

from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from subtracker.handlers.utils.dependencies import Dependencies, get_dependencies
from subtracker.handlers.utils.errors import create_api_response, handle_service_errors
from subtracker.handlers.utils.observability import logger, metrics, tracer
from subtracker.handlers.utils.request import ApiRequest, extract_claims
from subtracker.logic.auth_service import AuthService


def _auth_service(deps: Dependencies) -> AuthService:
    return AuthService(
        identity=deps.identity,
        users=deps.users,
        auto_confirm_signups=deps.auto_confirm_signups,
    )


def _ok(output: Any, status_code: int = HTTPStatus.OK) -> Dict[str, Any]:
    return create_api_response(int(status_code), output.model_dump(by_alias=True, exclude_none=True))


@handle_service_errors
def handle_signup(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    body = ApiRequest.from_event(event).body
    output = _auth_service(deps).signup(body.get('email'), body.get('password'), body.get('name'))
    return _ok(output, HTTPStatus.CREATED)


@handle_service_errors
def handle_confirm(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    body = ApiRequest.from_event(event).body
    return _ok(_auth_service(deps).confirm(body.get('email'), body.get('code')))


@handle_service_errors
def handle_resend_code(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    body = ApiRequest.from_event(event).body
    return _ok(_auth_service(deps).resend_code(body.get('email')))


@handle_service_errors
def handle_login(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    body = ApiRequest.from_event(event).body
    return _ok(_auth_service(deps).login(body.get('email'), body.get('password')))


@handle_service_errors
def handle_change_password(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    request = ApiRequest.from_event(event)
    output = _auth_service(deps).change_password(
        principal,
        request.body.get('oldPassword'),
        request.body.get('newPassword'),
        request.bearer_token(),
    )
    return _ok(output)


@handle_service_errors
def handle_get_profile(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    return _ok(_auth_service(deps).get_profile(principal))


@handle_service_errors
def handle_update_profile(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    body = ApiRequest.from_event(event).body
    return _ok(_auth_service(deps).update_profile(principal, body.get('name')))


# Responses carry tokens and profile data; keep them out of traces
@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def signup_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_signup(event, get_dependencies())


@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def confirm_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_confirm(event, get_dependencies())


@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def resend_code_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_resend_code(event, get_dependencies())


@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def login_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_login(event, get_dependencies())


@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def change_password_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_change_password(event, get_dependencies())


@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def get_profile_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_get_profile(event, get_dependencies())


@tracer.capture_lambda_handler(capture_response=False)
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def update_profile_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_update_profile(event, get_dependencies())
