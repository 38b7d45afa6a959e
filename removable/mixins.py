"""
SQLAlchemy mixin and decorator for removable models.

``Removable`` is the trait a model inherits; ``acts_as_removable`` registers
the model with its options so the trait's scopes, hooks and operations work
for it.

Usage:
    @acts_as_removable(column_name="archived_at", validate=True)
    class Note(Base, Removable):
        __tablename__ = "notes"
        id: Mapped[int] = mapped_column(primary_key=True)
        archived_at: Mapped[Optional[datetime]] = marker_column()
"""

from datetime import datetime
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    overload,
)

from sqlalchemy import ColumnElement, DateTime, Select
from sqlalchemy.orm import Mapped, Session, mapped_column

from . import persistence, scopes
from .config import RemovableOptions, get_config
from .hooks import HOOK_MARKER, Callback, HookEvent, HookPhase
from .registry import RemovableBehavior, RemovableRegistry, get_registry
from .results import MutationResult
from .validation import ValidationResult, get_validator

M = TypeVar("M", bound=type)


def marker_column(**kwargs: Any) -> Mapped[Optional[datetime]]:
    """
    Build a nullable, indexed, timezone-aware marker column.

    Keyword arguments are passed on to ``mapped_column``.
    """
    kwargs.setdefault("nullable", True)
    kwargs.setdefault("index", True)
    kwargs.setdefault("default", None)
    return mapped_column(DateTime(timezone=True), **kwargs)


class Removable:
    """
    Trait for SQLAlchemy models whose rows are removed by timestamp.

    Provides:
    - ``present`` / ``removed`` scopes
    - ``before_remove`` style hook registration
    - ``remove``, ``remove_strict``, ``unremove``, ``unremove_strict``
    - A ``save`` primitive honoring ``__validations__``

    The model declares the marker column itself (see ``marker_column``) and
    must be decorated with ``@acts_as_removable`` to become removable.
    """

    # Left unannotated so declarative mapping skips them.
    __removable_registry__ = None  # type: Optional[RemovableRegistry]
    __validations__ = MappingProxyType({})  # type: Mapping[str, Mapping[str, Any]]

    # Registration lookups

    @classmethod
    def _removable_registry(cls) -> RemovableRegistry:
        registry = cls.__removable_registry__
        return registry if registry is not None else get_registry()

    @classmethod
    def _removable_behavior(cls) -> RemovableBehavior:
        return cls._removable_registry().behavior_for(cls)

    @classmethod
    def is_removable(cls) -> bool:
        """True only for classes registered with ``@acts_as_removable``."""
        return cls._removable_registry().is_registered(cls)

    @classmethod
    def removable_options(cls) -> RemovableOptions:
        return cls._removable_behavior().options

    @classmethod
    def marker_key(cls) -> str:
        """Mapped attribute key of the marker column."""
        key, _ = scopes.resolve_marker(cls, cls.removable_options().column_name)
        return key

    # Scopes

    @classmethod
    def present_criteria(cls) -> ColumnElement[bool]:
        return scopes.present_criteria(cls)

    @classmethod
    def removed_criteria(cls) -> ColumnElement[bool]:
        return scopes.removed_criteria(cls)

    @classmethod
    def present(cls) -> Select[Any]:
        """Statement selecting rows that are not removed."""
        return scopes.select_present(cls)

    @classmethod
    def removed(cls) -> Select[Any]:
        """Statement selecting removed rows."""
        return scopes.select_removed(cls)

    # Hook registration

    @classmethod
    def _add_hook(
        cls, phase: HookPhase, event: HookEvent, callback: Callback
    ) -> Callback:
        cls._removable_behavior().hooks.register(phase, event, callback)
        return callback

    @classmethod
    def before_remove(cls, callback: Callback) -> Callback:
        return cls._add_hook(HookPhase.BEFORE, HookEvent.REMOVE, callback)

    @classmethod
    def after_remove(cls, callback: Callback) -> Callback:
        return cls._add_hook(HookPhase.AFTER, HookEvent.REMOVE, callback)

    @classmethod
    def before_unremove(cls, callback: Callback) -> Callback:
        return cls._add_hook(HookPhase.BEFORE, HookEvent.UNREMOVE, callback)

    @classmethod
    def after_unremove(cls, callback: Callback) -> Callback:
        return cls._add_hook(HookPhase.AFTER, HookEvent.UNREMOVE, callback)

    # Instance API

    def is_removed(self) -> bool:
        """True if the in-memory marker holds any value."""
        return getattr(self, self.marker_key()) is not None

    def remove(self, session: Optional[Session] = None, **save_options: Any) -> bool:
        """
        Mark this record as removed now and save it.

        Args:
            session: Session to use, defaults to the record's own
            **save_options: Overrides for the model's save options, e.g. validate

        Returns:
            False if validation failed or a hook aborted the removal
        """
        return self._mutate(HookEvent.REMOVE, session, save_options).succeeded

    def remove_strict(
        self, session: Optional[Session] = None, **save_options: Any
    ) -> None:
        """
        Mark this record as removed now and save it.

        Raises:
            RecordInvalid: If validation failed
            RecordNotSaved: If a hook aborted the removal
        """
        self._mutate(HookEvent.REMOVE, session, save_options).raise_for_failure()

    def unremove(self, session: Optional[Session] = None, **save_options: Any) -> bool:
        """Clear the marker and save. Returns False on failure."""
        return self._mutate(HookEvent.UNREMOVE, session, save_options).succeeded

    def unremove_strict(
        self, session: Optional[Session] = None, **save_options: Any
    ) -> None:
        """Clear the marker and save. Raises on failure."""
        self._mutate(HookEvent.UNREMOVE, session, save_options).raise_for_failure()

    def _mutate(
        self,
        event: HookEvent,
        session: Optional[Session],
        save_options: Dict[str, Any],
    ) -> MutationResult:
        behavior = self._removable_behavior()
        value = get_config().now() if event is HookEvent.REMOVE else None
        return persistence.run_mutation(
            self,
            behavior,
            event,
            value,
            session=session,
            save_options=save_options,
        )

    # Save primitive

    def run_validations(self) -> ValidationResult:
        return get_validator().validate(self)

    def validate_record(self, result: ValidationResult) -> None:
        """Override to add errors beyond ``__validations__``."""

    def save(self, session: Optional[Session] = None, validate: bool = True) -> bool:
        return persistence.save(self, session, validate=validate)

    def save_strict(
        self, session: Optional[Session] = None, validate: bool = True
    ) -> None:
        persistence.save_strict(self, session, validate=validate)


def _collect_tagged_hooks(cls: type) -> Tuple[Tuple[str, Tuple[Any, ...]], ...]:
    tagged = []
    for klass in reversed(cls.__mro__):
        for name, attr in vars(klass).items():
            if not callable(attr):
                continue
            keys = getattr(attr, HOOK_MARKER, None)
            if keys and (name, keys) not in tagged:
                tagged.append((name, keys))
    return tuple(tagged)


@overload
def acts_as_removable(cls: M) -> M: ...


@overload
def acts_as_removable(
    cls: None = None,
    *,
    column_name: Optional[str] = None,
    validate: Optional[bool] = None,
    registry: Optional[RemovableRegistry] = None,
) -> Callable[[M], M]: ...


def acts_as_removable(
    cls: Optional[M] = None,
    *,
    column_name: Optional[str] = None,
    validate: Optional[bool] = None,
    registry: Optional[RemovableRegistry] = None,
) -> Union[M, Callable[[M], M]]:
    """
    Register a model as removable.

    Can be used bare (``@acts_as_removable``) or with options.

    Args:
        column_name: Marker column; defaults to ``removed_at``
        validate: Run validation rules on removal saves; defaults to False

    Decorating a registered model again merges: omitted options keep their
    current values.
        registry: Registry to record the model in; defaults to the global one

    Raises:
        TypeError: If the class does not inherit Removable
        RemovableConfigurationError: If the mapped table lacks the marker column
    """

    def decorator(model: M) -> M:
        if not (isinstance(model, type) and issubclass(model, Removable)):
            raise TypeError(
                f"{getattr(model, '__name__', model)!r} must inherit Removable "
                "to be decorated with acts_as_removable"
            )

        target: RemovableRegistry = (
            registry if registry is not None else model._removable_registry()
        )
        existing = target.lookup(model)
        options = RemovableOptions.build(
            column_name=column_name,
            validate=validate,
            previous=existing.options if existing is not None else None,
        )
        scopes.resolve_marker(model, options.column_name)

        if registry is not None:
            model.__removable_registry__ = registry

        already_registered = existing is not None
        behavior = target.register(model, options)

        if not already_registered:
            for name, keys in _collect_tagged_hooks(model):
                for phase, event in keys:
                    behavior.hooks.register(phase, event, name)

        return model

    if cls is not None:
        return decorator(cls)
    return decorator


def is_removable_model(obj: Union[Any, Type[Any]]) -> bool:
    """True if the object, or its class, is a registered removable model."""
    model = obj if isinstance(obj, type) else type(obj)
    return issubclass(model, Removable) and model.is_removable()
