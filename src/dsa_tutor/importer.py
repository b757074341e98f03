"""Read problem rows from CSV, JSON or YAML files and load them into the catalog."""
import csv
import json
import logging
from pathlib import Path

from dsa_tutor.catalog import bulk_import
from dsa_tutor.errors import ValidationError

logger = logging.getLogger(__name__)


def _rows_from_data(data) -> list:
    if isinstance(data, dict):
        data = data.get("problems", [])
    if not isinstance(data, list):
        raise ValidationError("expected a list of problems")
    return data


def read_rows(file_path: str) -> list[dict]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".csv":
            with path.open(newline="", encoding="utf-8") as f:
                return [dict(row) for row in csv.DictReader(f)]
        elif suffix == ".json":
            return _rows_from_data(json.loads(path.read_text(encoding="utf-8")))
        elif suffix in (".yaml", ".yml"):
            import yaml
            try:
                data = yaml.safe_load(path.read_text(encoding="utf-8"))
            except yaml.YAMLError as e:
                raise ValidationError(f"Could not parse {path.name}: {e}") from e
            return _rows_from_data(data)
    except (csv.Error, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Could not parse {path.name}: {e}") from e
    raise ValidationError(f"Unsupported file type: {suffix or path.name}")


def import_file(db_path: str, file_path: str) -> dict:
    """Import every row of a problem file. Bad rows are reported, not fatal."""
    rows = read_rows(file_path)
    logger.info("Read %d rows from %s", len(rows), file_path)
    result = bulk_import(db_path, rows)
    result["filename"] = Path(file_path).name
    return result
