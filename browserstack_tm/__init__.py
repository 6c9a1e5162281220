"""
BrowserStack Test Management SDK.

This package contains:
- API Client: typed wrapper over the BrowserStack Test Management REST API.
- Playwright: report parsing, status mapping and result uploading.
- Configuration: settings file loading and validation.
"""

__version__ = "0.1.0"
