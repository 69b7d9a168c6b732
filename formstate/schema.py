"""Structural checks for field definitions and engine configuration.

This module provides a DefinitionValidator that checks configuration mappings
against JSON Schema definitions and produces structured ConfigIssue entries.
It only checks the *shape* of definitions (a field needs a non-empty string
name, listener groups must be sequences, ...). Form values are never checked
here; that is the job of each field's validators.

Listener groups hold Python callables, so the validator extends Draft 7 to
treat tuples as arrays and places no constraint on array items.
"""

from typing import Any, Dict, List

import jsonschema
from jsonschema import Draft7Validator, validators

from formstate.errors import ConfigIssue, IssueCode
from formstate.types import ListenerRole


def _is_array(checker, instance) -> bool:
    return isinstance(instance, (list, tuple))


_TYPE_CHECKER = Draft7Validator.TYPE_CHECKER.redefine("array", _is_array)

DefinitionDraft7Validator = validators.extend(Draft7Validator, type_checker=_TYPE_CHECKER)


# Both the camelCase keys used by UI configs and their snake_case aliases
LISTENER_KEYS: Dict[str, ListenerRole] = {
    "onChange": ListenerRole.ON_CHANGE,
    "onBlur": ListenerRole.ON_BLUR,
    "onSubmit": ListenerRole.ON_SUBMIT,
    "on_change": ListenerRole.ON_CHANGE,
    "on_blur": ListenerRole.ON_BLUR,
    "on_submit": ListenerRole.ON_SUBMIT,
}


LISTENER_SCHEMA: Dict[str, Any] = {
    "type": ["object", "null"],
    "properties": {key: {"type": ["array", "null"]} for key in LISTENER_KEYS},
    "additionalProperties": False,
}


FIELD_DEFINITION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "listener": LISTENER_SCHEMA,
    },
    "required": ["name"],
}


ENGINE_CONFIG_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "pass_context": {"type": "boolean"},
        "missing_value": {},
        "delete_removes_key": {"type": "boolean"},
        "emit_events": {"type": "boolean"},
    },
    "additionalProperties": False,
}


class DefinitionValidator:
    """JSON Schema checker for configuration mappings.

    Wraps the jsonschema library and translates its errors into ConfigIssue
    entries with dot-notation paths.

    Attributes:
        schema: The JSON Schema definition to check against
        validator: The underlying jsonschema validator instance

    Examples:
        >>> checker = DefinitionValidator(FIELD_DEFINITION_SCHEMA)
        >>> checker.validate({"name": "email"})
        []
        >>> [issue.code.value for issue in checker.validate({})]
        ['required']
    """

    def __init__(self, schema: Dict[str, Any]) -> None:
        """Initialize the checker with a JSON Schema.

        Raises:
            jsonschema.SchemaError: If the provided schema is invalid
        """
        self.schema = schema
        DefinitionDraft7Validator.check_schema(schema)
        self.validator = DefinitionDraft7Validator(schema)

    def validate(self, data: Any, prefix: str = "") -> List[ConfigIssue]:
        """Check ``data`` and return every issue found (empty when valid).

        Args:
            data: The mapping to check
            prefix: Optional path prefix, e.g. the index of the definition
                inside a field list
        """
        errors = sorted(self.validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
        return [self._translate_error(error, prefix) for error in errors]

    def _translate_error(self, error: jsonschema.ValidationError, prefix: str) -> ConfigIssue:
        parts = [prefix] if prefix else []
        parts.extend(str(p) for p in error.absolute_path)
        path = ".".join(parts)

        if error.validator == "required":
            missing = [key for key in error.validator_value if key not in error.instance]
            full_path = ".".join(parts + missing[:1])
            return ConfigIssue(
                path=full_path,
                code=IssueCode.REQUIRED,
                message=f"Field '{full_path}' is required but was not provided",
            )

        if error.validator == "type":
            received_type = type(error.instance).__name__
            return ConfigIssue(
                path=path,
                code=IssueCode.INVALID_TYPE,
                message=f"Field '{path}' has invalid type. Expected {error.validator_value}, got {received_type}",
                received=received_type,
            )

        if error.validator == "minLength":
            return ConfigIssue(
                path=path,
                code=IssueCode.TOO_SHORT,
                message=f"Field '{path}' is too short. Minimum length: {error.validator_value}",
                received=error.instance,
            )

        if error.validator == "additionalProperties":
            known = set(error.schema.get("properties", {}))
            unknown = sorted(str(key) for key in error.instance if key not in known)
            return ConfigIssue(
                path=path,
                code=IssueCode.UNKNOWN_KEY,
                message=f"Field '{path}' has unknown keys: {', '.join(unknown)}",
                received=unknown,
            )

        return ConfigIssue(
            path=path,
            code=IssueCode.INVALID_VALUE,
            message=f"Field '{path}' is invalid: {error.message}",
        )


field_definition_validator = DefinitionValidator(FIELD_DEFINITION_SCHEMA)
engine_config_validator = DefinitionValidator(ENGINE_CONFIG_SCHEMA)


__all__ = [
    "LISTENER_KEYS",
    "FIELD_DEFINITION_SCHEMA",
    "ENGINE_CONFIG_SCHEMA",
    "DefinitionValidator",
    "field_definition_validator",
    "engine_config_validator",
]
