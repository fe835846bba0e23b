"""
Pytest configuration file.

This file is automatically loaded by pytest and provides global test configuration.
It adds the project's source directory to the Python path so that the flat
modules can be imported during test execution, and points the log folder at
a temporary directory before the application module is imported.
"""
import os
import sys
import tempfile

# Add the current directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

# Keep test runs from writing into the project's logs folder
os.environ.setdefault("EXCEL_MAPPER_LOG_DIR", os.path.join(tempfile.gettempdir(), "excel_mapper_test_logs"))
