"""Version information for v4l-saver."""

from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "v4l-saver"


def get_version() -> str:
    """Get version from installed package metadata.

    Falls back to reading pyproject.toml when running from a source
    checkout that was never installed.

    Returns:
        Version string (e.g., "1.0.0") or "unknown" if not found
    """
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        try:
            import tomllib
            from pathlib import Path

            pyproject_path = Path(__file__).parents[3] / "pyproject.toml"

            if pyproject_path.exists():
                with open(pyproject_path, "rb") as f:
                    data = tomllib.load(f)
                return data.get("project", {}).get("version", "unknown")
            return "unknown"

        except (OSError, ValueError):
            return "unknown"


__version__ = get_version()
