"""
Document store for governance and initiative state.

The engine only talks to the DocumentStore interface. FileDocumentStore keeps
everything under the configured output directory:

  governance/governance.yaml
  initiatives/<key>/state.yaml
  initiatives/<key>/timeline.md
  initiatives/<key>/artifacts/<FILE>.md
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import yaml

from signoff.lib.config import SignoffConfig
from signoff.lib.errors import ConcurrentModification, CorruptState
from signoff.lib.validate import ValidationError, validate, check_before_write

logger = logging.getLogger(__name__)

STATE_FILENAME = "state.yaml"
TIMELINE_FILENAME = "timeline.md"
ARTIFACTS_DIRNAME = "artifacts"


class DocumentStore(ABC):
    """Abstract persistence keyed by initiative identifier."""

    @abstractmethod
    def governance_exists(self) -> bool:
        ...

    @abstractmethod
    def load_governance(self) -> Optional[dict]:
        """Return the governance document, or None if absent.

        Raises:
            CorruptState: If the document cannot be parsed or is invalid
        """

    @abstractmethod
    def save_governance(self, data: dict) -> str:
        """Replace the governance document. Returns its location."""

    @abstractmethod
    def initiative_exists(self, key: str) -> bool:
        ...

    @abstractmethod
    def list_initiatives(self) -> list[str]:
        ...

    @abstractmethod
    def load_initiative(self, key: str) -> Optional[dict]:
        """Return the state document for key, or None if absent.

        Raises:
            CorruptState: If the document cannot be parsed or is invalid
        """

    @abstractmethod
    def save_initiative(self, key: str, data: dict, expected_revision: Optional[int]) -> int:
        """Persist a state document and return its new revision.

        Args:
            expected_revision: Revision the caller loaded, or None when creating

        Raises:
            ConcurrentModification: If the stored revision differs
        """

    @abstractmethod
    def append_timeline(self, key: str, text: str) -> None:
        ...

    @abstractmethod
    def write_artifact(self, key: str, filename: str, content: str) -> Path:
        """Write an artifact stub and return its absolute path."""

    @abstractmethod
    def artifact_dir(self, key: str) -> str:
        """Artifact directory of key, as recorded in tracking paths."""


def _atomic_write(path: Path, content: str) -> None:
    """Write via a temp file + rename so readers never see a partial document."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _dump(data: dict) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


class FileDocumentStore(DocumentStore):
    """YAML documents and markdown files under config.output_dir."""

    def __init__(self, config: SignoffConfig):
        self.config = config

    def _state_path(self, key: str) -> Path:
        return self.config.initiative_dir(key) / STATE_FILENAME

    def _read_document(self, path: Path, schema_name: str) -> Optional[dict]:
        if not path.exists():
            return None

        shown = self.config.relative(path)
        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise CorruptState(shown, f"invalid YAML: {e}") from None

        if not isinstance(data, dict):
            raise CorruptState(shown, "expected a mapping at the top level")

        try:
            validate(data, schema_name)
        except ValidationError as e:
            raise CorruptState(shown, str(e)) from None
        return data

    def _write_document(self, path: Path, data: dict, schema_name: str) -> None:
        check_before_write(data, schema_name, path)
        _atomic_write(path, _dump(data))
        logger.debug(f"[STORE] wrote {path}")

    def governance_exists(self) -> bool:
        return self.config.governance_path.exists()

    def load_governance(self) -> Optional[dict]:
        return self._read_document(self.config.governance_path, "governance")

    def save_governance(self, data: dict) -> str:
        self._write_document(self.config.governance_path, data, "governance")
        return self.config.relative(self.config.governance_path)

    def initiative_exists(self, key: str) -> bool:
        return self._state_path(key).exists()

    def list_initiatives(self) -> list[str]:
        root = self.config.initiatives_dir
        if not root.exists():
            return []
        return sorted(d.name for d in root.iterdir() if (d / STATE_FILENAME).exists())

    def load_initiative(self, key: str) -> Optional[dict]:
        return self._read_document(self._state_path(key), "initiative")

    def save_initiative(self, key: str, data: dict, expected_revision: Optional[int]) -> int:
        path = self._state_path(key)
        current = self.load_initiative(key)
        found = current["revision"] if current is not None else None

        if found != expected_revision:
            raise ConcurrentModification(
                key,
                -1 if expected_revision is None else expected_revision,
                -1 if found is None else found,
            )

        new_revision = 0 if expected_revision is None else expected_revision + 1
        data = dict(data, revision=new_revision)
        self._write_document(path, data, "initiative")
        return new_revision

    def append_timeline(self, key: str, text: str) -> None:
        path = self.config.initiative_dir(key) / TIMELINE_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a") as f:
            f.write(text)

    def write_artifact(self, key: str, filename: str, content: str) -> Path:
        path = self.config.initiative_dir(key) / ARTIFACTS_DIRNAME / filename
        _atomic_write(path, content)
        return path

    def artifact_dir(self, key: str) -> str:
        return self.config.relative(self.config.initiative_dir(key) / ARTIFACTS_DIRNAME)
