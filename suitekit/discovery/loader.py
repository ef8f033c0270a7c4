"""Loading of suite, result and dispatch manifests from JSON or YAML files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from suitekit.model.tree import ResultTree, SuiteTree

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def load_manifest(path: str | Path) -> dict[str, Any]:
    """Read a manifest document.

    Files ending in .yaml/.yml are parsed as YAML, everything else as JSON.

    Args:
        path: Path to the manifest file.

    Returns:
        The parsed mapping (empty for an empty document).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be parsed or is not a mapping.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text) if text.strip() else None
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid manifest {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest {path} must contain a mapping at the top level")
    return data


def load_suite_tree(path: str | Path) -> SuiteTree:
    """Load a suite definition tree from a manifest file."""
    return SuiteTree.from_manifest(load_manifest(path))


def load_result_tree(path: str | Path) -> ResultTree:
    """Load a run result tree from a manifest file."""
    return ResultTree.from_manifest(load_manifest(path))
