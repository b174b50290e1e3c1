"""
Unit tests for the partial update expression builder.
"""

from decimal import Decimal

from subtracker.dal.update_expression import UpdateExpressionBuilder, build_update

TIMESTAMP = "2024-05-01T10:00:00+00:00"


class TestUpdateExpressionBuilder:
    """Tests for building SET clauses from present fields."""

    def test_only_timestamp_when_no_fields(self):
        instruction = build_update({}, timestamp=TIMESTAMP)

        assert instruction.update_expression == "SET #f0 = :v0"
        assert instruction.expression_attribute_names == {"#f0": "updated_at"}
        assert instruction.expression_attribute_values == {":v0": TIMESTAMP}

    def test_present_fields_then_timestamp(self):
        instruction = build_update({"name": "Spotify", "amount": Decimal("9.99")}, timestamp=TIMESTAMP)

        assert instruction.update_expression == "SET #f0 = :v0, #f1 = :v1, #f2 = :v2"
        assert instruction.updated_attributes == ["name", "amount", "updated_at"]
        assert instruction.expression_attribute_values[":v1"] == Decimal("9.99")
        assert instruction.expression_attribute_values[":v2"] == TIMESTAMP

    def test_none_values_are_skipped(self):
        instruction = build_update({"name": None, "category": "Music"}, timestamp=TIMESTAMP)

        assert instruction.updated_attributes == ["category", "updated_at"]

    def test_false_and_zero_are_written(self):
        instruction = build_update({"is_active": False, "amount": Decimal("0")}, timestamp=TIMESTAMP)

        assert instruction.updated_attributes == ["is_active", "amount", "updated_at"]

    def test_allow_list_filters_fields(self):
        instruction = build_update(
            {"name": "Hulu", "user_id": "someone-else", "id": "other"},
            allowed=("name",),
            timestamp=TIMESTAMP,
        )

        assert instruction.updated_attributes == ["name", "updated_at"]

    def test_caller_cannot_set_timestamp(self):
        instruction = build_update({"updated_at": "1999-01-01"}, timestamp=TIMESTAMP)

        assert instruction.expression_attribute_values == {":v0": TIMESTAMP}

    def test_timestamp_defaults_to_now(self):
        instruction = UpdateExpressionBuilder().set("name", "Hulu").build()

        assert instruction.expression_attribute_values[":v1"].endswith("+00:00")

    def test_as_kwargs(self):
        kwargs = build_update({"name": "Hulu"}, timestamp=TIMESTAMP).as_kwargs()

        assert kwargs == {
            "UpdateExpression": "SET #f0 = :v0, #f1 = :v1",
            "ExpressionAttributeNames": {"#f0": "name", "#f1": "updated_at"},
            "ExpressionAttributeValues": {":v0": "Hulu", ":v1": TIMESTAMP},
        }
