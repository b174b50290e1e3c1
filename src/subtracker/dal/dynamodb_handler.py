"""
Data Access Layer (DAL) for DynamoDB operations.

A thin, keyed adapter over a single DynamoDB table: get, put, partial update,
delete and index queries. Every boto3 failure is converted into a ``DALError``
so handlers can render it consistently. No scans are offered.
"""

import functools
import time
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from aws_lambda_powertools.metrics import MetricUnit

from subtracker.dal.update_expression import UpdateExpressionBuilder, UpdateInstruction
from subtracker.handlers.utils.errors import INTERNAL_SERVER_ERROR, UpstreamError
from subtracker.handlers.utils.observability import count_metric, logger, metrics, tracer


class DALError(UpstreamError):
    """Raised when a DynamoDB operation fails."""

    error_code = "DAL_ERROR"

    def __init__(
        self,
        message: str,
        operation: str,
        table_name: str,
        provider_code: Optional[str] = None,
    ):
        super().__init__(error=INTERNAL_SERVER_ERROR, message=message)
        self.operation = operation
        self.table_name = table_name
        self.provider_code = provider_code


def handle_dynamodb_errors(operation: str):
    """Decorator to record metrics and translate boto3 errors for a table operation."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self: 'DynamoDBHandler', *args, **kwargs):
            operation_start = time.time()
            count_metric(f"DynamoDB{operation}Count")

            try:
                result = func(self, *args, **kwargs)
            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']
                count_metric(f"DynamoDB{operation}Error")

                logger.error(f"DynamoDB {operation} error", extra={
                    "error_code": error_code,
                    "error_message": error_message,
                    "table_name": self.table_name,
                    "operation": operation,
                })
                raise DALError(
                    message=error_message,
                    operation=operation,
                    table_name=self.table_name,
                    provider_code=error_code,
                ) from e
            except BotoCoreError as e:
                count_metric(f"DynamoDB{operation}Error")
                logger.error(f"DynamoDB connection error during {operation}", extra={
                    "error": str(e),
                    "table_name": self.table_name,
                })
                raise DALError(
                    message=f"Database connection error: {e}",
                    operation=operation,
                    table_name=self.table_name,
                ) from e

            duration_ms = (time.time() - operation_start) * 1000
            metrics.add_metric(name=f"DynamoDB{operation}Duration", unit=MetricUnit.Milliseconds, value=duration_ms)
            tracer.put_annotation("dynamodb_operation", operation)
            tracer.put_annotation("table_name", self.table_name)
            return result

        return wrapper
    return decorator


class DynamoDBHandler:
    """Keyed operations on one DynamoDB table."""

    def __init__(
        self,
        table_name: str,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        """
        Initialize DynamoDB handler.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region name
            endpoint_url: DynamoDB endpoint URL (for local testing)
        """
        self.table_name = table_name

        resource_kwargs: Dict[str, Any] = {}
        if region_name:
            resource_kwargs['region_name'] = region_name
        if endpoint_url:
            resource_kwargs['endpoint_url'] = endpoint_url

        self.dynamodb = boto3.resource('dynamodb', **resource_kwargs)
        self.table = self.dynamodb.Table(table_name)

        logger.debug("DynamoDB handler initialized", extra={
            "table_name": table_name,
            "region_name": region_name,
            "endpoint_url": endpoint_url,
        })

    @tracer.capture_method
    @handle_dynamodb_errors("GetItem")
    def get_item(self, key: Dict[str, Any], consistent_read: bool = False) -> Optional[Dict[str, Any]]:
        """
        Get a single item by its full primary key.

        Returns:
            Item data or None if not found
        """
        response = self.table.get_item(Key=key, ConsistentRead=consistent_read)
        item = response.get('Item')

        logger.debug("Item lookup completed", extra={
            "table_name": self.table_name,
            "found": item is not None,
        })
        return item

    @tracer.capture_method
    @handle_dynamodb_errors("PutItem")
    def put_item(self, item: Dict[str, Any], condition_expression: Optional[Any] = None) -> Dict[str, Any]:
        """
        Store an item as given.

        Returns:
            The stored item data
        """
        put_item_kwargs: Dict[str, Any] = {'Item': item}
        if condition_expression is not None:
            put_item_kwargs['ConditionExpression'] = condition_expression

        self.table.put_item(**put_item_kwargs)

        logger.info("Item stored successfully", extra={
            "table_name": self.table_name,
            "item_id": item.get('id', 'unknown'),
        })
        return item

    @tracer.capture_method
    @handle_dynamodb_errors("UpdateItem")
    def update_item(
        self,
        key: Dict[str, Any],
        updates: Mapping[str, Any],
        condition_expression: Optional[Any] = None,
        return_values: str = "ALL_NEW",
    ) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update to an item.

        Only attributes present in ``updates`` (with a non-None value) are
        written; ``updated_at`` is refreshed on every call.

        Returns:
            Item attributes as selected by ``return_values``
        """
        instruction: UpdateInstruction = UpdateExpressionBuilder().set_present(updates).build()

        update_kwargs: Dict[str, Any] = {
            'Key': key,
            'ReturnValues': return_values,
            **instruction.as_kwargs(),
        }
        if condition_expression is not None:
            update_kwargs['ConditionExpression'] = condition_expression

        response = self.table.update_item(**update_kwargs)

        logger.info("Item updated successfully", extra={
            "table_name": self.table_name,
            "updated_attributes": instruction.updated_attributes,
        })
        return response.get('Attributes')

    @tracer.capture_method
    @handle_dynamodb_errors("DeleteItem")
    def delete_item(self, key: Dict[str, Any]) -> bool:
        """
        Delete an item by its full primary key.

        Returns:
            True if an item was deleted, False if there was nothing to delete
        """
        response = self.table.delete_item(Key=key, ReturnValues='ALL_OLD')
        deleted = bool(response.get('Attributes'))

        if deleted:
            logger.info("Item deleted successfully", extra={"table_name": self.table_name})
        else:
            logger.warning("Item not found for deletion", extra={"table_name": self.table_name})
        return deleted

    @tracer.capture_method
    @handle_dynamodb_errors("Query")
    def query_items(
        self,
        key_condition: Any,
        index_name: Optional[str] = None,
        filter_expression: Optional[Any] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
        scan_index_forward: bool = True,
    ) -> Dict[str, Any]:
        """
        Query one page of items by key condition.

        Returns:
            Dictionary with 'items', 'count' and optional 'last_evaluated_key'
        """
        query_kwargs: Dict[str, Any] = {
            'KeyConditionExpression': key_condition,
            'ScanIndexForward': scan_index_forward,
        }
        if index_name:
            query_kwargs['IndexName'] = index_name
        if filter_expression is not None:
            query_kwargs['FilterExpression'] = filter_expression
        if limit:
            query_kwargs['Limit'] = limit
        if exclusive_start_key:
            query_kwargs['ExclusiveStartKey'] = exclusive_start_key

        response = self.table.query(**query_kwargs)

        result: Dict[str, Any] = {
            'items': response.get('Items', []),
            'count': response.get('Count', 0),
        }
        if 'LastEvaluatedKey' in response:
            result['last_evaluated_key'] = response['LastEvaluatedKey']

        logger.info("Query completed successfully", extra={
            "table_name": self.table_name,
            "index_name": index_name,
            "items_count": result['count'],
            "has_more_results": 'last_evaluated_key' in result,
        })
        return result

    def query_all_items(
        self,
        key_condition: Any,
        index_name: Optional[str] = None,
        filter_expression: Optional[Any] = None,
    ) -> List[Dict[str, Any]]:
        """Follow query pagination until every matching item is collected."""
        items: List[Dict[str, Any]] = []
        start_key: Optional[Dict[str, Any]] = None
        while True:
            page = self.query_items(
                key_condition=key_condition,
                index_name=index_name,
                filter_expression=filter_expression,
                exclusive_start_key=start_key,
            )
            items.extend(page['items'])
            start_key = page.get('last_evaluated_key')
            if not start_key:
                return items
