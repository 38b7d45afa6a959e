"""
Removable - soft deletion for SQLAlchemy models.

Instead of deleting rows, removable models stamp a nullable marker column
with the time of removal. A ``None`` marker means the record is present,
any other value means it was removed.

Key Features
------------
* **Scopes**: composable ``present`` / ``removed`` select statements
* **Operations**: ``remove``, ``remove_strict``, ``unremove``, ``unremove_strict``
* **Hooks**: ordered before/after callbacks around every mutation
* **Validation**: optional validation rules on removal saves
* **Configuration**: per-model column name and validation flag

Quick Start
-----------
>>> from removable import Removable, acts_as_removable, marker_column
>>>
>>> @acts_as_removable
... class Note(Base, Removable):
...     __tablename__ = "notes"
...     id: Mapped[int] = mapped_column(primary_key=True)
...     removed_at: Mapped[Optional[datetime]] = marker_column()
>>>
>>> note.remove()
True
>>> session.scalars(Note.present()).all()
[]
"""

__version__ = "1.0.0"

from .config import (
    RemovableOptions,
    RemovableSettings,
    SaveOptions,
    configure,
    get_config,
    set_config,
)
from .exceptions import (
    NotRemovableError,
    RecordInvalid,
    RecordNotSaved,
    RemovableConfigurationError,
    RemovableError,
    RemovalAborted,
)
from .hooks import HookEvent, HookPhase, removal_callback
from .mixins import Removable, acts_as_removable, is_removable_model, marker_column
from .registry import RemovableRegistry, get_registry, removable_models
from .results import MutationResult, MutationStatus
from .scopes import count_present, count_removed, select_present, select_removed
from .validation import (
    RecordValidator,
    ValidationResult,
    ValidationRule,
    get_validator,
    validate_record,
)

__all__ = [
    # Mixin and registration
    "Removable",
    "acts_as_removable",
    "is_removable_model",
    "marker_column",
    "RemovableRegistry",
    "get_registry",
    "removable_models",
    # Hooks
    "HookEvent",
    "HookPhase",
    "removal_callback",
    # Scopes
    "select_present",
    "select_removed",
    "count_present",
    "count_removed",
    # Results
    "MutationResult",
    "MutationStatus",
    # Validation
    "RecordValidator",
    "ValidationResult",
    "ValidationRule",
    "get_validator",
    "validate_record",
    # Configuration
    "RemovableOptions",
    "RemovableSettings",
    "SaveOptions",
    "configure",
    "get_config",
    "set_config",
    # Exceptions
    "RemovableError",
    "RemovableConfigurationError",
    "NotRemovableError",
    "RecordInvalid",
    "RecordNotSaved",
    "RemovalAborted",
]
