"""
Configuration for signoff.

Everything that depends on the project location lives on an explicit
SignoffConfig passed to the engine. Values come from, in order of precedence:
explicit arguments, SIGNOFF_* environment variables, <root>/signoff.yaml,
defaults.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


DEFAULT_OUTPUT_DIR = "_bmad-output"
DEFAULT_LOCK_TIMEOUT = 30
CONFIG_FILENAME = "signoff.yaml"


@dataclass(frozen=True)
class SignoffConfig:
    """Project-level configuration."""
    project_root: Path
    output_dir: Path  # Absolute; defaults to <project_root>/_bmad-output
    lock_timeout: int = DEFAULT_LOCK_TIMEOUT  # Seconds to wait for a lock

    @property
    def governance_dir(self) -> Path:
        return self.output_dir / "governance"

    @property
    def governance_path(self) -> Path:
        return self.governance_dir / "governance.yaml"

    @property
    def initiatives_dir(self) -> Path:
        return self.output_dir / "initiatives"

    @property
    def locks_dir(self) -> Path:
        return self.output_dir / "locks"

    def initiative_dir(self, key: str) -> Path:
        return self.initiatives_dir / key

    def relative(self, path: Path) -> str:
        """Render a path relative to the project root when it lives inside it."""
        try:
            return path.relative_to(self.project_root).as_posix()
        except ValueError:
            return str(path)


def _read_config_file(project_root: Path) -> dict:
    config_file = project_root / CONFIG_FILENAME
    if not config_file.exists():
        return {}

    try:
        data = yaml.safe_load(config_file.read_text()) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring unreadable {config_file}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring {config_file}: expected a mapping")
        return {}
    return data


def load_config(
    project_root: Path,
    output_dir: Optional[Path] = None,
    lock_timeout: Optional[int] = None,
) -> SignoffConfig:
    """Build a SignoffConfig for the project rooted at project_root."""
    project_root = Path(project_root).resolve()
    file_config = _read_config_file(project_root)

    out = (
        output_dir
        or os.environ.get("SIGNOFF_OUTPUT_DIR")
        or file_config.get("output_dir")
        or DEFAULT_OUTPUT_DIR
    )
    out = Path(out)
    if not out.is_absolute():
        out = project_root / out

    if lock_timeout is None:
        raw = os.environ.get("SIGNOFF_LOCK_TIMEOUT", file_config.get("lock_timeout", DEFAULT_LOCK_TIMEOUT))
        try:
            lock_timeout = int(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid lock_timeout '{raw}', using {DEFAULT_LOCK_TIMEOUT}")
            lock_timeout = DEFAULT_LOCK_TIMEOUT

    return SignoffConfig(project_root=project_root, output_dir=out, lock_timeout=lock_timeout)
