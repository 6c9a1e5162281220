"""
BrowserStack Test Management SDK - Test Suite Package.

Unit tests for the API client, the Playwright report parser, status
mapper and uploader, and the configuration loader.
"""
