"""
Configuration Management Module.

Handles loading and validation of:
- BrowserStack credentials and endpoint settings.
- Upload options (project, run naming, test case creation).
"""

from browserstack_tm.config.loader import ConfigLoader, ConfigurationError
from browserstack_tm.config.schema import SchemaValidationError, validate_upload_config

__all__ = ["ConfigLoader", "ConfigurationError", "SchemaValidationError", "validate_upload_config"]
