"""
Partial update builder for DynamoDB ``UpdateItem`` calls.

Translates a mapping of attribute name to optional new value into a ``SET``
expression that only touches the attributes actually supplied, and always
refreshes the ``updated_at`` timestamp.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Mapping, Optional

TIMESTAMP_ATTRIBUTE = 'updated_at'


@dataclass(frozen=True)
class UpdateInstruction:
    """Arguments for a DynamoDB ``update_item`` call."""

    update_expression: str
    expression_attribute_names: Dict[str, str] = field(default_factory=dict)
    expression_attribute_values: Dict[str, Any] = field(default_factory=dict)

    @property
    def updated_attributes(self) -> list[str]:
        return list(self.expression_attribute_names.values())

    def as_kwargs(self) -> Dict[str, Any]:
        return {
            'UpdateExpression': self.update_expression,
            'ExpressionAttributeNames': self.expression_attribute_names,
            'ExpressionAttributeValues': self.expression_attribute_values,
        }


class UpdateExpressionBuilder:
    """
    Accumulates ``SET`` clauses for a single item update.

    Every attribute name goes through an ``#alias`` so reserved words such as
    ``name`` need no special handling. ``None`` means "leave unchanged".
    """

    def __init__(self, timestamp_attribute: str = TIMESTAMP_ATTRIBUTE) -> None:
        self.timestamp_attribute = timestamp_attribute
        self._values: Dict[str, Any] = {}

    def set(self, attribute: str, value: Any) -> 'UpdateExpressionBuilder':
        if value is None or attribute == self.timestamp_attribute:
            return self
        self._values[attribute] = value
        return self

    def set_present(
        self,
        fields: Mapping[str, Any],
        allowed: Optional[Iterable[str]] = None,
    ) -> 'UpdateExpressionBuilder':
        """Add every present field, optionally restricted to an allow-list."""
        allowed_set = set(allowed) if allowed is not None else None
        for attribute, value in fields.items():
            if allowed_set is not None and attribute not in allowed_set:
                continue
            self.set(attribute, value)
        return self

    def build(self, timestamp: Optional[str] = None) -> UpdateInstruction:
        timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        values = dict(self._values)
        values[self.timestamp_attribute] = timestamp

        clauses = []
        names: Dict[str, str] = {}
        placeholders: Dict[str, Any] = {}
        for index, (attribute, value) in enumerate(values.items()):
            name_key = f'#f{index}'
            value_key = f':v{index}'
            clauses.append(f'{name_key} = {value_key}')
            names[name_key] = attribute
            placeholders[value_key] = value

        return UpdateInstruction(
            update_expression='SET ' + ', '.join(clauses),
            expression_attribute_names=names,
            expression_attribute_values=placeholders,
        )


def build_update(
    fields: Mapping[str, Any],
    allowed: Optional[Iterable[str]] = None,
    timestamp: Optional[str] = None,
) -> UpdateInstruction:
    """Shortcut for building an update from a mapping of present fields."""
    return UpdateExpressionBuilder().set_present(fields, allowed).build(timestamp)
