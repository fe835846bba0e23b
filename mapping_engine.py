import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from mapping_rules import DataType, MappingRule

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
OutputRecord = Dict[str, Any]

_DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


class CellKind(Enum):
    NUMERIC = "numeric"
    TEXT = "text"
    BOOLEAN = "boolean"
    NULL = "null"


@dataclass(frozen=True)
class CellValue:
    """
    Raw cell value tagged with the kind the decoder produced.

    Conversions are total: they never raise, whatever the raw value.
    """
    kind: CellKind
    raw: Any

    @classmethod
    def of(cls, raw: Any) -> "CellValue":
        # bool is a subclass of int, so it is tested first
        if raw is None:
            return cls(CellKind.NULL, raw)
        if isinstance(raw, bool):
            return cls(CellKind.BOOLEAN, raw)
        if isinstance(raw, (int, float)):
            return cls(CellKind.NUMERIC, raw)
        return cls(CellKind.TEXT, raw)

    def to_number(self) -> Union[int, float]:
        """
        Numeric form of the cell; NaN when the value is not a decimal number.
        """
        if self.kind is CellKind.NUMERIC:
            return self.raw
        if self.kind is CellKind.BOOLEAN:
            return int(self.raw)
        if self.kind is CellKind.TEXT:
            text = str(self.raw).strip()
            if _INTEGER_PATTERN.match(text):
                return int(text)
            if _DECIMAL_PATTERN.match(text):
                return float(text)
        return math.nan

    def to_text(self) -> str:
        return str(self.raw)

    def to_boolean(self) -> bool:
        # Only the literal lowercase text "true" counts; str(True) is "True"
        return self.to_text() == "true"


def cast_value(value: Any, data_type: Optional[Union[DataType, str]]) -> Any:
    """
    Coerce a raw cell value to the rule's data type.

    Args:
        value: Raw cell value from a row
        data_type: Target type, either a DataType or the rule's raw text

    Returns:
        The converted value, or the value unchanged when no type applies
    """
    if not isinstance(data_type, DataType):
        data_type = DataType.parse(data_type)
    if data_type is None:
        return value

    cell = CellValue.of(value)
    if data_type is DataType.NUMBER:
        return cell.to_number()
    if data_type is DataType.BOOLEAN:
        return cell.to_boolean()
    return cell.to_text()


def _map_row(row: Row, rules: Sequence[MappingRule], keep_unmapped: bool) -> OutputRecord:
    record: OutputRecord = dict(row) if keep_unmapped else {}
    for rule in rules:
        if rule.column_name not in row:
            continue
        record[rule.field_name] = cast_value(row[rule.column_name], rule.target_type)
        if keep_unmapped and rule.field_name != rule.column_name:
            record.pop(rule.column_name, None)
    return record


def apply_mappings(
    rows: Sequence[Row],
    rules: Sequence[MappingRule],
    keep_unmapped: bool = False
) -> List[OutputRecord]:
    """
    Build one output record per row from the mapping rules.

    With no rules every row passes through unchanged. Otherwise each record
    is a projection holding only the fields written by rules whose column
    exists in that row; when several rules write the same field the last
    one wins. With ``keep_unmapped`` the record instead starts as a copy of
    the row and renamed source columns are removed.

    Args:
        rows: Rows read from the first sheet, in sheet order
        rules: Validated mapping rules, in request order
        keep_unmapped: Keep columns no rule refers to

    Returns:
        List of output records, same length and order as ``rows``
    """
    if not rules:
        logger.debug("No mapping rules supplied, passing %d rows through", len(rows))
        return [dict(row) for row in rows]

    records = [_map_row(row, rules, keep_unmapped) for row in rows]
    logger.info(
        "Applied mapping rules",
        extra={"row_count": len(rows), "rule_count": len(rules), "keep_unmapped": keep_unmapped}
    )
    return records
