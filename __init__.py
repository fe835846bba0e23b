"""
Excel Mapper Application

This package provides an API that converts the first sheet of an uploaded
Excel file into JSON records, renaming columns and casting values according
to caller supplied mapping rules.

Key modules:
- main.py: FastAPI application with the upload endpoint
- excel_file_process.py: Upload pre-check and request orchestration
- excel_reader.py: Spreadsheet decoding into row records
- mapping_rules.py: Mapping rule parsing and validation
- mapping_engine.py: Column mapping and value casting
- config.py: Environment driven settings
- utils/result.py: Result pattern implementation for error handling
- utils/errors.py: Rejected request preconditions
"""
