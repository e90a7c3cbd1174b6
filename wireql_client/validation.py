"""
Schema validation for WireQL client configuration and transaction steps
"""

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Union, cast

try:
    import jsonschema  # type: ignore[import-untyped]
except ImportError:
    raise ImportError("jsonschema package is required. Install with: pip install jsonschema")

from .exceptions import ValidationError
from .types import ClientOptions, SqlOperation, SqlStep, WebSocketOptions

_validate: Callable[[object, Dict[str, Any]], None] = jsonschema.validate  # type: ignore[assignment]
JSValidationError = jsonschema.ValidationError  # type: ignore[assignment]

SCHEMA_PATH = Path(__file__).parent / "schema" / "wireql.schema.json"
with open(SCHEMA_PATH, encoding="utf-8") as f:
    SCHEMA = json.load(f)


class SchemaValidator:
    @staticmethod
    def validate_against_schema(data: Any, schema_ref: str, code: str = "INVALID_REQUEST") -> None:
        """Validate data against a definition of the bundled schema"""
        if schema_ref not in SCHEMA["definitions"]:
            raise KeyError(f"Unknown schema definition: {schema_ref}")
        schema = cast(Dict[str, Any], {**SCHEMA, "$ref": f"#/definitions/{schema_ref}"})
        try:
            _validate(data, schema)
        except JSValidationError as e:  # type: ignore
            raise ValidationError(
                code, f"Schema validation failed: {e.message}", {"path": list(e.path)}
            )

    @staticmethod
    def validate_client_options(config: Dict[str, Any]) -> ClientOptions:
        data = dict(config)
        websocket = data.get("websocket")
        if isinstance(websocket, WebSocketOptions):
            data["websocket"] = asdict(websocket)
        SchemaValidator.validate_against_schema(data, "ClientOptions", "INVALID_CONFIG")

        if "websocket" in data:
            data["websocket"] = WebSocketOptions(**data["websocket"])
        return ClientOptions(**data)

    @staticmethod
    def validate_steps(steps: Iterable[Union[SqlStep, Dict[str, Any]]]) -> List[SqlStep]:
        """Turn transaction steps (dicts or SqlStep) into validated SqlStep objects"""
        validated: List[SqlStep] = []
        for step in steps:
            data = step.to_dict() if is_dataclass(step) else dict(cast(Dict[str, Any], step))
            SchemaValidator.validate_against_schema(data, "SqlStep")
            validated.append(
                SqlStep(
                    op=SqlOperation(data["op"]),
                    query=data["query"],
                    values=list(data.get("values") or []),
                )
            )

        if not validated:
            raise ValidationError("INVALID_REQUEST", "Transaction requires at least one step")
        return validated
