import math
import pytest

from mapping_engine import CellKind, CellValue, apply_mappings, cast_value
from mapping_rules import DataType, MappingRule


def rule(column_name, field_name, data_type=None):
    return MappingRule(columnName=column_name, fieldName=field_name, dataType=data_type)


@pytest.fixture
def people_rows():
    """
    Fixture providing rows as produced by the Excel reader.

    Returns:
        list: Rows with mixed cell types and one missing cell
    """
    return [
        {"Name": "Ann", "Age": "30", "Active": "true"},
        {"Name": "Bob", "Age": 41, "Active": True},
        {"Name": "Cid", "Active": "false"},
    ]


class TestCellValue:
    """
    Tests for the tagged cell value.
    """

    @pytest.mark.parametrize(
        "raw, expected_kind",
        [
            (None, CellKind.NULL),
            (True, CellKind.BOOLEAN),
            (False, CellKind.BOOLEAN),
            (3, CellKind.NUMERIC),
            (2.5, CellKind.NUMERIC),
            ("x", CellKind.TEXT),
            ("2024-01-15T00:00:00", CellKind.TEXT),
        ],
        ids=["null", "true", "false", "int", "float", "text", "iso-date"]
    )
    def test_kind_follows_raw_type(self, raw, expected_kind):
        """
        Test that booleans are tagged as booleans even though bool subclasses int.
        """
        assert CellValue.of(raw).kind is expected_kind
        assert CellValue.of(raw).raw is raw


class TestCastValue:
    """
    Tests for cast_value.
    """

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("42", 42),
            (" 42 ", 42),
            ("-7", -7),
            ("3.5", 3.5),
            (".5", 0.5),
            ("1e3", 1000.0),
            (42, 42),
            (2.25, 2.25),
            (True, 1),
            (False, 0),
        ],
        ids=["int-text", "padded", "negative", "decimal", "leading-dot", "exponent",
             "int", "float", "bool-true", "bool-false"]
    )
    def test_number_parses_decimal_values(self, raw, expected):
        assert cast_value(raw, "number") == expected

    def test_number_of_integer_text_is_int(self):
        result = cast_value("42", "number")
        assert result == 42
        assert isinstance(result, int)

    def test_number_of_overflowing_text_is_infinite(self):
        assert cast_value("1e400", "number") == math.inf
        assert cast_value("-1e400", "number") == -math.inf

    @pytest.mark.parametrize(
        "raw",
        ["abc", "", "   ", "1_000", "12abc", "0x1F", None],
        ids=["letters", "empty", "blank", "underscore", "trailing-letters", "hex", "none"]
    )
    def test_number_of_non_numeric_is_nan_without_raising(self, raw):
        """
        Test that a non-numeric value yields NaN instead of an exception.
        """
        result = cast_value(raw, "number")
        assert isinstance(result, float)
        assert math.isnan(result)

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("true", True),
            ("True", False),
            ("TRUE", False),
            (" true", False),
            ("1", False),
            ("yes", False),
            (True, False),
            (False, False),
            (1, False),
            (None, False),
        ],
        ids=["lower-true", "title-true", "upper-true", "padded", "one", "yes",
             "bool-true", "bool-false", "int-one", "none"]
    )
    def test_boolean_is_true_only_for_literal_lowercase_true(self, raw, expected):
        """
        Test the strict boolean cast.

        The canonical string of Python's True is "True", so decoder booleans
        map to False.
        """
        assert cast_value(raw, "boolean") is expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Ann", "Ann"),
            (42, "42"),
            (2.5, "2.5"),
            (True, "True"),
            (None, "None"),
        ],
        ids=["text", "int", "float", "bool", "none"]
    )
    def test_string_uses_canonical_representation(self, raw, expected):
        assert cast_value(raw, "string") == expected

    @pytest.mark.parametrize(
        "data_type",
        [None, "", "date", "integer", "  number"],
        ids=["none", "empty", "date", "integer", "padded-number"]
    )
    def test_unrecognized_type_passes_value_through(self, data_type):
        value = {"nested": 1}
        assert cast_value(value, data_type) is value
        assert cast_value("42", data_type) == "42"

    @pytest.mark.parametrize(
        "data_type",
        ["NUMBER", "Number", "nUmBeR", DataType.NUMBER],
        ids=["upper", "title", "mixed", "enum"]
    )
    def test_type_name_is_case_insensitive(self, data_type):
        assert cast_value("42", data_type) == 42

    def test_casting_twice_yields_same_value(self):
        """
        Test that repeating a cast with the same data type is stable.
        """
        assert cast_value(cast_value("42", "number"), "number") == 42
        assert cast_value(cast_value(42, "string"), "string") == "42"
        assert cast_value("true", "boolean") is True
        assert cast_value("true", "boolean") is True
        assert math.isnan(cast_value(cast_value("abc", "number"), "number"))


class TestApplyMappings:
    """
    Tests for apply_mappings.
    """

    def test_without_rules_rows_pass_through(self, people_rows):
        """
        Test that an empty rule list returns every row unchanged.
        """
        result = apply_mappings(people_rows, [])

        assert result == people_rows

    def test_without_rules_records_are_copies(self, people_rows):
        result = apply_mappings(people_rows, [])
        result[0]["Name"] = "changed"

        assert people_rows[0]["Name"] == "Ann"

    def test_rename_drops_unmapped_columns(self):
        """
        Test that a non-empty rule list projects rows onto the mapped fields.
        """
        rows = [{"Name": "Ann", "Age": "30"}]

        result = apply_mappings(rows, [rule("Name", "fullName")])

        assert result == [{"fullName": "Ann"}]

    def test_number_rule_produces_numeric_value(self):
        rows = [{"Score": "42"}]

        result = apply_mappings(rows, [rule("Score", "score", "number")])

        assert result == [{"score": 42}]
        assert isinstance(result[0]["score"], int)

    def test_missing_column_contributes_no_key(self, people_rows):
        """
        Test that a rule whose column is absent from a row adds nothing to it.
        """
        rules = [rule("Name", "name"), rule("Age", "age", "number")]

        result = apply_mappings(people_rows, rules)

        assert result[2] == {"name": "Cid"}
        assert "age" not in result[2]

    def test_row_matching_no_rule_yields_empty_record(self, people_rows):
        result = apply_mappings(people_rows, [rule("Unknown", "unknown")])

        assert result == [{}, {}, {}]

    def test_last_rule_for_same_field_wins(self):
        rows = [{"First": "Ann", "Nick": "Annie"}]
        rules = [rule("First", "name"), rule("Nick", "name")]

        result = apply_mappings(rows, rules)

        assert result == [{"name": "Annie"}]

    def test_last_rule_wins_only_when_its_column_exists(self):
        rows = [{"First": "Ann"}, {"First": "Bob", "Nick": "Bobby"}]
        rules = [rule("First", "name"), rule("Nick", "name")]

        result = apply_mappings(rows, rules)

        assert result == [{"name": "Ann"}, {"name": "Bobby"}]

    def test_one_column_can_feed_several_fields(self):
        rows = [{"Age": "30"}]
        rules = [rule("Age", "age", "number"), rule("Age", "ageText", "string")]

        result = apply_mappings(rows, rules)

        assert result == [{"age": 30, "ageText": "30"}]

    def test_column_lookup_is_exact(self):
        """
        Test that header matching does not normalize case or whitespace.
        """
        rows = [{"Name ": "Ann", "name": "lower"}]

        result = apply_mappings(rows, [rule("Name", "fullName")])

        assert result == [{}]

    def test_mixed_casts_on_reader_rows(self, people_rows):
        rules = [
            rule("Name", "name", "string"),
            rule("Age", "age", "number"),
            rule("Active", "active", "boolean"),
        ]

        result = apply_mappings(people_rows, rules)

        assert result == [
            {"name": "Ann", "age": 30, "active": True},
            {"name": "Bob", "age": 41, "active": False},
            {"name": "Cid", "active": False},
        ]

    @pytest.mark.parametrize(
        "rules",
        [
            [],
            [rule("Name", "name")],
            [rule("Missing", "missing")],
            [rule("Name", "a"), rule("Age", "a", "number"), rule("Active", "b", "boolean")],
        ],
        ids=["no-rules", "one-rule", "inert-rule", "overlapping-rules"]
    )
    def test_row_count_is_preserved(self, people_rows, rules):
        assert len(apply_mappings(people_rows, rules)) == len(people_rows)

    def test_no_rows_yields_no_records(self):
        assert apply_mappings([], [rule("Name", "name")]) == []

    def test_rows_are_not_modified(self, people_rows):
        snapshot = [dict(row) for row in people_rows]

        apply_mappings(people_rows, [rule("Age", "age", "number")], keep_unmapped=True)

        assert people_rows == snapshot


class TestApplyMappingsKeepUnmapped:
    """
    Tests for apply_mappings with keep_unmapped, which augments rows instead of projecting them.
    """

    def test_renamed_column_is_replaced(self):
        rows = [{"Name": "Ann", "Age": "30"}]

        result = apply_mappings(rows, [rule("Name", "fullName")], keep_unmapped=True)

        assert result == [{"Age": "30", "fullName": "Ann"}]

    def test_same_name_rule_casts_in_place(self):
        rows = [{"Name": "Ann", "Age": "30"}]

        result = apply_mappings(rows, [rule("Age", "Age", "number")], keep_unmapped=True)

        assert result == [{"Name": "Ann", "Age": 30}]

    def test_missing_column_leaves_row_as_is(self):
        rows = [{"Name": "Ann"}]

        result = apply_mappings(rows, [rule("Age", "age", "number")], keep_unmapped=True)

        assert result == [{"Name": "Ann"}]
