from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional


@dataclass(frozen=True, slots=True)
class ProjectPaths:
    """Resolved project paths.

    Relative config values are resolved against the project root, never the
    current working directory.

    Args:
        root: Project root directory.
    """

    root: Path

    @property
    def configs_dir(self) -> Path:
        """Return the configs directory."""
        return (self.root / "configs").resolve()

    @property
    def acf_json_dir(self) -> Path:
        """Return the default ACF Local JSON directory."""
        return (self.configs_dir / "acf-json").resolve()

    @classmethod
    def discover(cls, start: Optional[Path] = None) -> ProjectPaths:
        """Discover the project root by locating a marker file.

        Args:
            start: Optional starting path.

        Returns:
            ProjectPaths: Resolved project paths.
        """
        root = _find_upwards(
            start=start or Path(__file__).resolve(),
            markers=("pyproject.toml", "setup.cfg", "setup.py"),
        )
        return cls(root=root)

    def resolve_relative(self, value: str | Path) -> Path:
        p = Path(value).expanduser()
        if p.is_absolute():
            return p.resolve()
        return (self.root / p).resolve()


def _find_upwards(start: Path, markers: Iterable[str]) -> Path:
    start = start.resolve()
    for parent in (start,) + tuple(start.parents):
        for marker in markers:
            if (parent / marker).exists():
                return parent
    return Path.cwd().resolve()
