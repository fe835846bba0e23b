from fastapi import FastAPI, File, Form, UploadFile
import os
import math
import logging
from datetime import datetime
from typing import Any, Optional
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, get_settings
from excel_file_process import FileProcessor

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> str:
    """
    Configure console logging and the daily log file.

    Args:
        settings: Application settings holding the log folder and level

    Returns:
        Path of the log file receiving records
    """
    os.makedirs(settings.log_dir, exist_ok=True)
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    log_file_path = os.path.join(settings.log_dir, f"app_{datetime.now().strftime('%Y%m%d')}.log")
    root_logger = logging.getLogger()
    already_attached = any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_file_path)
        for handler in root_logger.handlers
    )
    if not already_attached:
        file_handler = logging.FileHandler(log_file_path)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)
    return log_file_path


def to_json_safe(value: Any) -> Any:
    """
    Replace non-finite floats with None so records serialize as JSON.

    Args:
        value: Records, a record or a single value

    Returns:
        The same structure with NaN and infinite values turned into None
    """
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_json_safe(item) for item in value]
    return value


settings = get_settings()
configure_logging(settings)

# Initialize FastAPI app with metadata
app = FastAPI(
    title="Excel Mapper API",
    description="API for converting Excel sheets into mapped JSON records",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

processor = FileProcessor(allowed_extensions=settings.allowed_extensions)


# API Endpoints
@app.post(
    "/excel/upload",
    tags=["Excel Mapping"],
    summary="Upload an Excel file and map it to JSON"
)
async def excel_to_object(
    file: Optional[UploadFile] = File(None, description="The Excel file to be uploaded (.xls or .xlsx)"),
    mappings: Optional[str] = Form(
        None,
        description="Mappings as a JSON string representing an array of mapping objects, "
                    'e.g. [{"columnName": "Name", "fieldName": "fullName", "dataType": "string"}]'
    ),
    keep_unmapped: bool = Form(False, description="Keep columns that no mapping refers to")
):
    """
    Convert the first sheet of an uploaded Excel file into JSON records.

    Without mappings every row is returned as-is. With mappings each record
    holds only the mapped fields, renamed and cast to the requested type.

    Returns:
        list: One JSON object per sheet row, or an error envelope with status 400/500
    """
    filename = file.filename if file is not None else None
    content = await file.read() if file is not None else None
    logger.info("Received Excel upload", extra={"upload_name": filename})

    result = processor.process_upload(filename, content, mappings, keep_unmapped=keep_unmapped)

    if result.is_failure():
        return JSONResponse(status_code=result.status_code.value, content=result.to_dict())
    return JSONResponse(content=to_json_safe(result.data))


# Run the application if executed directly
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Excel Mapper API in development mode.")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
