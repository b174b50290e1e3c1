"""
Email Processor Handler - scheduled intake of billing emails.

Not behind API Gateway, so responses carry no CORS headers and failures
use their own error body instead of the service error taxonomy.
"""

from http import HTTPStatus
from typing import Any, Dict

from aws_lambda_powertools.utilities.typing import LambdaContext

from subtracker.handlers.utils.dependencies import Dependencies, get_dependencies
from subtracker.handlers.utils.errors import BaseServiceError, create_api_response
from subtracker.handlers.utils.observability import count_metric, logger, metrics, tracer
from subtracker.logic.email_processor import EmailProcessor


def _failure_message(error: Exception) -> str:
    if isinstance(error, BaseServiceError) and error.message:
        return error.message
    return str(error)


def handle_email_event(event: Dict[str, Any], deps: Dependencies) -> Dict[str, Any]:
    processor = EmailProcessor(subscriptions=deps.subscriptions, price_changes=deps.price_changes)
    try:
        output = processor.process(event)
    except Exception as e:
        logger.exception("Email processing failed")
        count_metric("EmailProcessingFailure")
        return create_api_response(
            HTTPStatus.INTERNAL_SERVER_ERROR.value,
            {'error': 'Email processing failed', 'message': _failure_message(e)},
            cors_enabled=False,
        )

    return create_api_response(HTTPStatus.OK.value, output.model_dump(), cors_enabled=False)


@tracer.capture_lambda_handler
@logger.inject_lambda_context
@metrics.log_metrics(capture_cold_start_metric=True)
def email_processor_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    return handle_email_event(event, get_dependencies())
