"""Top-level package for the Advancement Toolkit.

Provides subpackages:
- advancement_toolkit.numbering – requirement-number grammar
- advancement_toolkit.structuring – hierarchy builder and progress roll-ups
- advancement_toolkit.reconcile – cross-version requirement mapping
- advancement_toolkit.history – ScoutBook history export parser
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
        except OSError:
            content = ""
        for line in content.splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.3.1"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("advancement-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
