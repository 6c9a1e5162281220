"""
Configuration Loader Module.

Loads upload settings from YAML or JSON files:
- ``browserstack`` section: credentials and endpoint settings for the client.
- ``upload`` section: project, run naming and test case creation options.

Files are validated against the bundled upload settings schema (see
``browserstack_tm.config.schema``).
Credentials missing from the file are taken from the ``BROWSERSTACK_USERNAME``
and ``BROWSERSTACK_ACCESS_KEY`` environment variables.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from loguru import logger

from browserstack_tm.api_client.client import DEFAULT_BASE_URL, ClientConfig
from browserstack_tm.config.schema import (
    SCHEMA_FILE,
    SchemaValidationError,
    validate_upload_config,
)
from browserstack_tm.playwright.report_parser import find_playwright_report
from browserstack_tm.playwright.uploader import UploadOptions

USERNAME_ENV = "BROWSERSTACK_USERNAME"
ACCESS_KEY_ENV = "BROWSERSTACK_ACCESS_KEY"


class ConfigurationError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""

    pass


_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.loads,
}


class ConfigLoader:
    """
    Reads upload settings files and builds client and upload settings from them.

    Parsed files are kept per resolved path until ``clear_cache`` is called.

    Attributes:
        config_dir: Directory searched first for relative filenames.
        schema_file: Schema the settings are validated against.
    """

    def __init__(
        self,
        config_dir: str | Path = ".",
        schema_file: str | Path | None = None,
    ) -> None:
        self.config_dir = Path(config_dir)
        self.schema_file = Path(schema_file) if schema_file else SCHEMA_FILE
        self._loaded: Dict[Path, Dict[str, Any]] = {}

        logger.info(f"ConfigLoader initialized — config_dir={self.config_dir}")

    def load(
        self,
        filename: str | Path,
        *,
        validate: bool = True,
        use_cache: bool = True,
    ) -> Dict[str, Any]:
        """
        Read a settings file.

        Args:
            filename: File name, looked up in ``config_dir`` and then relative
                      to the working directory. Absolute paths are used as-is.
            validate: Check the parsed data against the upload settings schema.
            use_cache: Reuse an earlier result for the same file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the file cannot be parsed or is invalid.
        """
        path = self._locate(filename)
        key = path.resolve()
        if use_cache and key in self._loaded:
            return self._loaded[key]

        logger.info(f"Reading upload settings: {path}")
        data = self._parse(path)
        if validate:
            self._check(path, data)

        if use_cache:
            self._loaded[key] = data
        return data

    def load_client_config(self, filename: str | Path) -> ClientConfig:
        """
        Build the API client settings from the ``browserstack`` section.

        Raises:
            ConfigurationError: If no username or access key is available.
        """
        section = self.load(filename).get("browserstack") or {}

        username = section.get("username") or os.environ.get(USERNAME_ENV, "")
        access_key = section.get("access_key") or os.environ.get(ACCESS_KEY_ENV, "")
        if not username or not access_key:
            raise ConfigurationError(
                f"BrowserStack credentials missing: set browserstack.username and "
                f"browserstack.access_key in {filename} or the {USERNAME_ENV} / "
                f"{ACCESS_KEY_ENV} environment variables"
            )

        return ClientConfig(
            username=username,
            access_key=access_key,
            base_url=section.get("base_url", DEFAULT_BASE_URL),
            timeout_sec=section.get("timeout_sec", 30),
            verify_ssl=section.get("verify_ssl", True),
        )

    def load_upload_options(self, filename: str | Path) -> UploadOptions:
        """
        Build the upload options from the ``upload`` section.

        Raises:
            ConfigurationError: If the file has no ``upload`` section.
        """
        section = self.load(filename).get("upload")
        if not section:
            raise ConfigurationError(f"No 'upload' section in {filename}")

        return UploadOptions(
            project_id=section["project_id"],
            test_run_name=section["test_run_name"],
            test_run_description=section.get("test_run_description"),
            test_plan_id=section.get("test_plan_id"),
            create_test_cases=section.get("create_test_cases", False),
        )

    def resolve_report_path(
        self,
        filename: str | Path,
        root_dir: str | Path | None = None,
    ) -> Optional[Path]:
        """
        Return ``upload.report_path`` if configured, else search ``root_dir``
        for a Playwright report.
        """
        section = self.load(filename).get("upload") or {}
        if section.get("report_path"):
            return Path(section["report_path"])
        return find_playwright_report(root_dir)

    def clear_cache(self) -> None:
        """Forget every previously loaded file."""
        self._loaded.clear()

    def _locate(self, filename: str | Path) -> Path:
        for candidate in (self.config_dir / filename, Path(filename)):
            if candidate.is_file():
                return candidate
        raise FileNotFoundError(
            f"Configuration file not found: {filename} "
            f"(looked in {self.config_dir} and the working directory)"
        )

    def _parse(self, path: Path) -> Dict[str, Any]:
        parser = _PARSERS.get(path.suffix.lower())
        if parser is None:
            raise ConfigurationError(
                f"Unsupported file format '{path.suffix}' for {path} "
                f"(expected one of {', '.join(sorted(_PARSERS))})"
            )

        try:
            data = parser(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{path} must contain a mapping of settings sections, "
                f"got {type(data).__name__}"
            )
        return data

    def _check(self, path: Path, data: Dict[str, Any]) -> None:
        try:
            validate_upload_config(data, self.schema_file)
        except SchemaValidationError as e:
            raise ConfigurationError(f"Upload settings in {path} failed validation: {e}") from e
