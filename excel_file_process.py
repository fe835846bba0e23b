import os
import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

from excel_reader import read_rows
from mapping_engine import apply_mappings
from mapping_rules import parse_mappings
from utils.errors import ConversionError, MissingFileError, UnsupportedFileTypeError
from utils.result import Result

logger = logging.getLogger(__name__)


class LogContext:
    """Context manager for tracking and logging operation metrics"""
    def __init__(self, operation_name: str, **kwargs):
        self.operation_name = operation_name
        self.start_time = None
        self.request_id = kwargs.pop('request_id', str(uuid.uuid4())[:8])
        self.extra = kwargs

    def __enter__(self):
        self.start_time = time.time()
        logger.info(f"Starting {self.operation_name}", extra={"request_id": self.request_id, **self.extra})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type:
            log = logger.warning if issubclass(exc_type, ConversionError) else logger.error
            log(
                f"Failed {self.operation_name} in {duration:.2f}s: {str(exc_val)}",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )
        else:
            logger.info(
                f"Completed {self.operation_name} in {duration:.2f}s",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )


def check_upload(
    filename: Optional[str],
    content: Optional[bytes],
    allowed_extensions: Sequence[str]
) -> None:
    """
    Reject an upload before any decoding happens.

    Args:
        filename: Original name of the uploaded file
        content: Uploaded bytes, None when no file part was sent
        allowed_extensions: Accepted suffixes such as ".xlsx"

    Raises:
        MissingFileError: If no file was supplied
        UnsupportedFileTypeError: If the name has no accepted extension
    """
    if content is None or not filename:
        raise MissingFileError("File is required!")

    extension = os.path.splitext(filename)[1].lower()
    if extension not in {ext.lower() for ext in allowed_extensions}:
        raise UnsupportedFileTypeError("Only Excel files are allowed!")


class FileProcessor:
    """
    Runs one conversion request from upload to mapped records.

    Steps run in a fixed order and stop at the first failure:
    - Upload pre-check
    - Mapping rule parsing
    - Spreadsheet decoding
    - Mapping
    """

    def __init__(self, allowed_extensions: Sequence[str]):
        self.allowed_extensions = list(allowed_extensions)

    def process_upload(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        mappings: Optional[str] = None,
        keep_unmapped: bool = False
    ) -> Result[List[Dict[str, Any]]]:
        """
        Convert an uploaded spreadsheet into mapped records.

        Args:
            filename: Original name of the uploaded file
            content: Uploaded bytes
            mappings: JSON text of the mapping rules, optional
            keep_unmapped: Keep columns no rule refers to

        Returns:
            Result[List[Dict[str, Any]]]: The records, or a failure with status code
        """
        log_context = {
            "request_id": str(uuid.uuid4())[:8],
            "upload_name": filename,
            "keep_unmapped": keep_unmapped
        }
        logger.info("Processing Excel upload", extra=log_context)

        try:
            with LogContext("upload check", **log_context):
                check_upload(filename, content, self.allowed_extensions)

            with LogContext("rule parsing", **log_context):
                rules = parse_mappings(mappings)
            log_context["rule_count"] = len(rules)

            with LogContext("file decoding", **log_context):
                rows = read_rows(content)
            log_context["row_count"] = len(rows)

            with LogContext("mapping", **log_context):
                records = apply_mappings(rows, rules, keep_unmapped=keep_unmapped)

        except ConversionError as e:
            logger.warning(f"Upload rejected: {e.message}", extra=log_context)
            return Result.from_error(e)
        except Exception as e:
            logger.exception("Unexpected error during file processing", extra={**log_context, "error": str(e)})
            return Result.server_error(f"Processing error: {str(e)}")

        logger.info(f"Successfully converted {len(records)} rows", extra=log_context)
        return Result.ok(records)
