"""Tool configuration file management.

Reads and writes the .suitekit_config JSON file holding export defaults and
retry query options. Missing keys fall back to DEFAULT_CONFIG.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from suitekit.model.properties import CATEGORY

DEFAULT_CONFIG_FILE = Path(".suitekit_config")

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "export_file": "ExportedTests.csv",
    "export_properties": [],
    "multiline_properties": [CATEGORY],
    "retry_query_file": None,
    "escape_retry_quotes": False,
}


class ToolConfig:
    """Manages the .suitekit_config JSON configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text(encoding="utf-8")
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    def save(self) -> None:
        """Write config to the file."""
        if self.path is None:
            raise ValueError("No config file path specified")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
            f.write("\n")

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return dict(self._data)

    @property
    def export_file(self) -> Path:
        """Get the default export destination."""
        return Path(self._data.get("export_file") or DEFAULT_CONFIG["export_file"])

    @property
    def export_properties(self) -> list[str]:
        """Get the property keys exported when none are requested."""
        return [str(k) for k in self._data.get("export_properties") or []]

    @property
    def joiners(self) -> dict[str, str]:
        """Get the per-key separators for multi-valued export cells."""
        keys = self._data.get("multiline_properties")
        if keys is None:
            keys = DEFAULT_CONFIG["multiline_properties"]
        return {str(k): "\n" for k in keys}

    @property
    def retry_query_file(self) -> Path | None:
        """Get the default retry query destination (None = stdout only)."""
        val = self._data.get("retry_query_file")
        return Path(val) if val else None

    @property
    def escape_retry_quotes(self) -> bool:
        """Whether parameterized names are quoted with escaped quotes."""
        return bool(self._data.get("escape_retry_quotes", False))

    def set_config(
        self,
        export_file: str | None = None,
        export_properties: list[str] | None = None,
        retry_query_file: str | None = None,
        escape_retry_quotes: bool | None = None,
    ) -> None:
        """Update configuration values."""
        if export_file is not None:
            self._data["export_file"] = export_file
        if export_properties is not None:
            self._data["export_properties"] = list(export_properties)
        if retry_query_file is not None:
            self._data["retry_query_file"] = retry_query_file
        if escape_retry_quotes is not None:
            self._data["escape_retry_quotes"] = escape_retry_quotes
