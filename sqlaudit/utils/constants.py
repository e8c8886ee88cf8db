"""Centralized constants for the sqlaudit utils package."""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

OUTPUT_DIR = Path("./.sqlaudit")

ERROR_LOG_FILE = OUTPUT_DIR / "error.log"
REPORT_FILE = OUTPUT_DIR / "sql_report.json"
CATALOG_FILE = OUTPUT_DIR / "sql_catalog.yml"

# ============================================================================
# ENVIRONMENT VARIABLES
# ============================================================================

ENV_PREFIX = "SQLAUDIT_"
ENV_LOG_LEVEL = "SQLAUDIT_LOG_LEVEL"
ENV_LOG_JSON = "SQLAUDIT_LOG_JSON"
ENV_LOG_FILE = "SQLAUDIT_LOG_FILE"
ENV_REQUEST_ID = "SQLAUDIT_REQUEST_ID"
