"""JSON schema checks of RPC payloads."""
import json
from functools import lru_cache
from pathlib import Path

import jsonschema

from expense_core import config


@lru_cache(maxsize=None)
def load_schema(name: str, schemas_dir: Path = config.SCHEMAS_DIR) -> dict:
    with open(schemas_dir / f"{name}.schema.json", "r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def _validator(name: str):
    schema = load_schema(name)
    cls = jsonschema.validators.validator_for(schema)
    cls.check_schema(schema)
    return cls(schema)


def payload_errors(data, schema_name: str) -> list[str]:
    """Every schema violation in an RPC payload, as ``path: message`` in document order.

    The path is dotted (``details.0.unit_price``); ``$`` is the payload root.
    """
    errors = sorted(_validator(schema_name).iter_errors(data), key=lambda e: list(e.absolute_path))
    return [
        f"{'.'.join(str(p) for p in e.absolute_path) or '$'}: {e.message}"
        for e in errors
    ]
