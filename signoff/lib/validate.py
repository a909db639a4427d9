"""
JSON Schema checks for governance.yaml and state.yaml.

Schemas ship inside the package (signoff/schemas/<name>.schema.json). The
store runs validate() on every document it reads and check_before_write()
on every document it is about to persist.
"""

import json
from functools import lru_cache
from pathlib import Path

from jsonschema.exceptions import best_match
from jsonschema.validators import validator_for

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"


class ValidationError(Exception):
    """A document does not match its schema."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


@lru_cache(maxsize=None)
def _validator(schema_name: str):
    """Compiled validator for a packaged schema, built once per process."""
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise ValidationError(schema_name, f"no packaged schema at {schema_path}")
    schema = json.loads(schema_path.read_text())
    return validator_for(schema)(schema)


def validate(data: dict, schema_name: str) -> None:
    """Check a document against the "governance" or "initiative" schema.

    Reports the most relevant violation with a dotted path into the document,
    e.g. ``artifacts.prd.active.status``.

    Raises:
        ValidationError: If the document does not match
    """
    error = best_match(_validator(schema_name).iter_errors(data))
    if error is None:
        return
    path = ".".join(str(p) for p in error.absolute_path) or "(root)"
    raise ValidationError(schema_name, error.message, path)


def check_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    """Same check as validate(), naming the file that would have been written."""
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(schema_name, f"not writing {filepath}: {e}") from None
