"""
Subscriptions Handler - Lambda functions for subscription CRUD.

The owner of every subscription is the ``sub`` claim of the caller; a user
id in the request body is ignored.
"""

from http import HTTPStatus
from typing import Any, Dict

from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from subtracker.handlers.utils.dependencies import Dependencies, get_dependencies
from subtracker.handlers.utils.errors import create_api_response, handle_service_errors
from subtracker.handlers.utils.observability import logger, metrics, tracer
from subtracker.handlers.utils.request import ApiRequest, extract_claims
from subtracker.logic.subscription_service import SubscriptionService


@handle_service_errors
def handle_create_subscription(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    request = ApiRequest.from_event(event)
    subscription = SubscriptionService(deps.subscriptions).create(principal.user_id, request.body)
    return create_api_response(HTTPStatus.CREATED.value, subscription)


@handle_service_errors
def handle_list_subscriptions(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    subscriptions = SubscriptionService(deps.subscriptions).list_all(principal.user_id)
    return create_api_response(HTTPStatus.OK.value, subscriptions)


@handle_service_errors
def handle_update_subscription(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    request = ApiRequest.from_event(event)
    subscription = SubscriptionService(deps.subscriptions).update(
        principal.user_id,
        request.path_parameter('id'),
        request.body,
    )
    return create_api_response(HTTPStatus.OK.value, subscription)


@handle_service_errors
def handle_delete_subscription(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    principal = extract_claims(event)
    request = ApiRequest.from_event(event)
    output = SubscriptionService(deps.subscriptions).delete(principal.user_id, request.path_parameter('id'))
    return create_api_response(HTTPStatus.OK.value, output.model_dump())


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def create_subscription_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_create_subscription(event, get_dependencies())


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def list_subscriptions_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_list_subscriptions(event, get_dependencies())


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def update_subscription_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_update_subscription(event, get_dependencies())


@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@metrics.log_metrics(capture_cold_start_metric=True)
def delete_subscription_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_delete_subscription(event, get_dependencies())
