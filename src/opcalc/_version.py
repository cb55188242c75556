"""Version of the opcalc distribution.

Read from the ``[project]`` table of opcalc's pyproject.toml when running
from a source checkout, otherwise from the installed package metadata.
"""

import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

_PYPROJECT = Path(__file__).parent.parent.parent / "pyproject.toml"


def get_version() -> str:
    """Return the opcalc version string, ``0.0.0`` when it cannot be found."""
    if _PYPROJECT.exists():
        if match := re.search(r'^version\s*=\s*"([^"]+)"', _PYPROJECT.read_text(), re.MULTILINE):
            return match.group(1)
    try:
        return _metadata_version("opcalc")
    except PackageNotFoundError:
        return "0.0.0"
