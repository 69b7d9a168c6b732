"""formstate: form state engine.

formstate tracks a dynamic set of named fields and provides:
- An ordered field table with an always-consistent name-keyed view
- Per-field validator pipelines run on change, blur and submit
- Value and error stores with shallow-merge updates
- Field mutators usable from inside validators
- A notification stream so a rendering layer can follow state changes

Basic usage:
    >>> from formstate import FormEngine
    >>> required = lambda value: "Required" if value in (None, "") else None
    >>> engine = FormEngine([{"name": "addr", "listener": {"onSubmit": [required]}}])
    >>> engine.on_submit()
    (False, 1)
    >>> engine.set_values({"addr": "x"})
    >>> engine.on_submit()
    (True, 0)
"""

__version__ = "0.1.0"
__author__ = "formstate contributors"

VERSION = (0, 1, 0)

from formstate.config import EngineConfig
from formstate.engine import FormEngine
from formstate.errors import ConfigError, FieldDefinitionError
from formstate.fields import FieldDefinition, to_array, to_record
from formstate.listeners import ListenerConfig
from formstate.types import EventType, FieldEvent, ValidationContext

__all__ = [
    "__version__",
    "VERSION",
    "FormEngine",
    "EngineConfig",
    "FieldDefinition",
    "ListenerConfig",
    "FieldEvent",
    "ValidationContext",
    "EventType",
    "ConfigError",
    "FieldDefinitionError",
    "to_array",
    "to_record",
]
