"""Engine configuration.

EngineConfig collects the behaviour switches of a FormEngine. It can be built
directly or from a plain mapping, which is checked with jsonschema first.

Usage:
    >>> cfg = EngineConfig.from_dict({"pass_context": True})
    >>> cfg.pass_context
    True
    >>> cfg.delete_removes_key
    True
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from formstate.errors import ConfigError
from formstate.schema import engine_config_validator


@dataclass(frozen=True)
class EngineConfig:
    """Behaviour switches for a FormEngine.

    Attributes:
        pass_context: Call validators as ``fn(value, context)`` with a
            ValidationContext snapshot instead of ``fn(value)``
        missing_value: Value handed to validators on submit for a field that
            has no stored value
        delete_removes_key: ``delete_value``/``delete_error`` remove the key
            instead of keeping it with None
        emit_events: Publish a FormEvent after each engine command
    """
    pass_context: bool = False
    missing_value: Any = None
    delete_removes_key: bool = True
    emit_events: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EngineConfig":
        """Create EngineConfig from a mapping.

        Raises:
            ConfigError: If the mapping has unknown keys or wrong types
        """
        data = dict(data or {})
        issues = engine_config_validator.validate(data)
        if issues:
            raise ConfigError(f"Invalid engine config: {issues[0].message}", issues=issues)
        return cls(**data)


DEFAULT_CONFIG = EngineConfig()


__all__ = [
    "EngineConfig",
    "DEFAULT_CONFIG",
]
