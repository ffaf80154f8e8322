"""Runtime checks for script entrypoints."""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Sequence
from importlib import metadata

MIN_PYTHON = (3, 12)

# import name → distribution name
REQUIRED_PACKAGES: dict[str, str] = {
    "pydantic": "pydantic",
    "numpy": "numpy",
    "pandas": "pandas",
    "unidecode": "Unidecode",
}

INSTALL_HINT = 'Install with `python -m pip install -e ".[dev]"`.'


def missing_modules(modules: Sequence[str]) -> list[str]:
    return sorted(mod for mod in modules if importlib.util.find_spec(mod) is None)


def validate_runtime(
    min_python: tuple[int, int] = MIN_PYTHON,
    required_modules: Sequence[str] = tuple(REQUIRED_PACKAGES),
    python_version: tuple[int, int] | None = None,
) -> None:
    """Raise RuntimeError if the interpreter is too old or a dependency is missing."""
    current = python_version or (sys.version_info.major, sys.version_info.minor)
    if current < min_python:
        raise RuntimeError(
            f"potdraw needs Python >={min_python[0]}.{min_python[1]}, "
            f"found {current[0]}.{current[1]}. {INSTALL_HINT}"
        )

    missing = missing_modules(required_modules)
    if missing:
        raise RuntimeError(f"Missing Python modules: {', '.join(missing)}. {INSTALL_HINT}")


def dependency_versions() -> dict[str, str]:
    """Installed versions of the required distributions ("missing" if absent)."""
    versions = {}
    for module, dist in REQUIRED_PACKAGES.items():
        try:
            versions[module] = metadata.version(dist)
        except metadata.PackageNotFoundError:
            versions[module] = "missing"
    return versions
