#!/usr/bin/env python3
"""Validate lease data YAML files against the schema."""
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from tracker.loader import parse_reading
from tracker.store import READINGS_KEY
from tracker.validation import check_monotonic


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def validate_lease_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single lease data file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=data, schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    else:
        readings = [parse_reading(item) for item in data.get(READINGS_KEY) or []]
        if not check_monotonic(readings):
            errors.append("Mileage decreases over time in readings:default")
    return errors


def main(argv=None):
    """Validate the given files, or every YAML file in the data/ directory."""
    args = sys.argv[1:] if argv is None else argv
    schema = load_schema()

    if args:
        yaml_files = [Path(a) for a in args]
    else:
        data_dir = Path(__file__).parent / "data"
        if not data_dir.exists():
            print(f"Error: data directory not found: {data_dir}")
            return 1
        yaml_files = sorted(list(data_dir.glob("*.yaml")) + list(data_dir.glob("*.yml")))
        if not yaml_files:
            print(f"Warning: No YAML files found in {data_dir}")
            return 0

    all_valid = True
    for filepath in yaml_files:
        errors = validate_lease_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
