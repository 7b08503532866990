"""Application version.

Installed distributions report their metadata; a source checkout run with
``PYTHONPATH=src`` has none, so the version is read from the nearest
``pyproject.toml`` above this file instead.
"""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path

import tomllib

UNKNOWN_VERSION = "0.0.0"


def find_pyproject(start: Path | None = None) -> Path | None:
    origin = (start or Path(__file__)).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _source_version(pyproject: Path | None) -> str:
    if pyproject is None:
        return UNKNOWN_VERSION
    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return UNKNOWN_VERSION
    return str(data.get("project", {}).get("version", UNKNOWN_VERSION))


@lru_cache(maxsize=1)
def get_app_version(package_name: str = "chatdraft") -> str:
    try:
        return _dist_version(package_name)
    except PackageNotFoundError:
        return _source_version(find_pyproject())
