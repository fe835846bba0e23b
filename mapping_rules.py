"""
Parsing and validation of caller supplied mapping rules.

Rules arrive as a JSON encoded array of objects shaped
``{"columnName": str, "fieldName": str, "dataType": str?}``.
"""
import json
import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from utils.errors import MalformedRulesError

logger = logging.getLogger(__name__)


class DataType(str, Enum):
    """Target types a rule may coerce a cell value to."""
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["DataType"]:
        """
        Resolve a rule's dataType case-insensitively.

        Args:
            value: Raw dataType text from the rule, may be None

        Returns:
            The matching DataType, or None when absent, empty or unrecognized
        """
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None


class MappingRule(BaseModel):
    """
    Instruction mapping one spreadsheet column to one output field.

    Attributes:
        column_name: Header of the source column, matched exactly
        field_name: Key written to the output record
        data_type: Optional coercion applied to the cell value
    """
    model_config = ConfigDict(frozen=True)

    column_name: StrictStr = Field(alias="columnName", min_length=1)
    field_name: StrictStr = Field(alias="fieldName", min_length=1)
    data_type: Optional[StrictStr] = Field(default=None, alias="dataType")

    @property
    def target_type(self) -> Optional[DataType]:
        return DataType.parse(self.data_type)


_RULE_LIST = TypeAdapter(List[MappingRule])


def _error_location(error: dict) -> str:
    return ".".join(str(part) for part in error["loc"])


def parse_mappings(raw: Optional[str]) -> List[MappingRule]:
    """
    Parse and validate the mappings payload of an upload request.

    Args:
        raw: JSON text of the rules array; None or blank means no rules

    Returns:
        List[MappingRule]: Validated rules in the order supplied

    Raises:
        MalformedRulesError: If the text is not JSON, not an array, or an
            element lacks a non-empty columnName/fieldName string
    """
    if raw is None or not raw.strip():
        return []

    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Mappings are not valid JSON", extra={"error": str(e)})
        raise MalformedRulesError("Invalid JSON format for mappings") from e

    if not isinstance(decoded, list):
        logger.warning("Mappings are not an array", extra={"type": type(decoded).__name__})
        raise MalformedRulesError("Mappings should be an array of objects")

    try:
        rules = _RULE_LIST.validate_python(decoded)
    except ValidationError as e:
        fields = [_error_location(error) for error in e.errors()]
        logger.warning("Mapping rule validation failed", extra={"fields": fields})
        raise MalformedRulesError(
            f"Invalid mapping rules: {', '.join(fields)}", fields=fields
        ) from e

    logger.debug("Parsed %d mapping rules", len(rules))
    return rules
