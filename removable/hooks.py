"""
Lifecycle hooks run around remove and unremove.

Hooks are kept as ordered lists per event and phase. The executor runs them
in registration order and stops at the first one raising ``RemovalAborted``.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple, TypeVar, Union

from .exceptions import RecordNotSaved, RemovalAborted

logger = logging.getLogger(__name__)

Callback = Union[Callable[[Any], Any], str]
F = TypeVar("F", bound=Callable[..., Any])

HOOK_MARKER = "__removable_hook__"


class HookEvent(str, Enum):
    """Mutations that fire hooks."""

    REMOVE = "remove"
    UNREMOVE = "unremove"


class HookPhase(str, Enum):
    """When a hook runs relative to the save."""

    BEFORE = "before"
    AFTER = "after"


HOOK_NAMES: Dict[str, Tuple[HookPhase, HookEvent]] = {
    f"{phase.value}_{event.value}": (phase, event)
    for event in HookEvent
    for phase in HookPhase
}


def parse_hook_name(name: str) -> Tuple[HookPhase, HookEvent]:
    """Split ``before_remove`` style names into phase and event."""
    try:
        return HOOK_NAMES[name]
    except KeyError:
        raise ValueError(
            f"Unknown hook {name!r}; expected one of {', '.join(HOOK_NAMES)}"
        ) from None


class HookChains:
    """Ordered callbacks for every phase and event of one model."""

    def __init__(self) -> None:
        self._chains: Dict[Tuple[HookPhase, HookEvent], List[Callback]] = {
            key: [] for key in HOOK_NAMES.values()
        }

    def register(self, phase: HookPhase, event: HookEvent, callback: Callback) -> None:
        """
        Append a callback to a chain.

        Args:
            phase: Before or after the save
            event: Remove or unremove
            callback: Callable taking the record, or the name of a record method
        """
        if not (callable(callback) or isinstance(callback, str)):
            raise TypeError(
                f"Hook must be callable or a method name, got {callback!r}"
            )
        self._chains[(phase, event)].append(callback)

    def callbacks(self, phase: HookPhase, event: HookEvent) -> List[Callback]:
        return list(self._chains[(phase, event)])

    def run(self, phase: HookPhase, event: HookEvent, record: Any) -> None:
        """
        Run one chain against a record.

        Raises:
            RecordNotSaved: If a callback raised RemovalAborted. Later
                callbacks are skipped.
        """
        for callback in self._chains[(phase, event)]:
            try:
                if isinstance(callback, str):
                    getattr(record, callback)()
                else:
                    callback(record)
            except RemovalAborted as exc:
                logger.debug(
                    "%s_%s hook %r aborted %s: %s",
                    phase.value,
                    event.value,
                    callback,
                    type(record).__name__,
                    exc.reason,
                )
                raise RecordNotSaved(record, exc.reason) from exc


def removal_callback(name: str) -> Callable[[F], F]:
    """
    Tag a method in a model body as a hook.

    ``@acts_as_removable`` registers tagged methods in definition order::

        @acts_as_removable
        class Note(Base, Removable):
            @removal_callback("before_remove")
            def archive_title(self):
                self.title = f"[archived] {self.title}"

    Args:
        name: before_remove, after_remove, before_unremove or after_unremove
    """
    key = parse_hook_name(name)

    def decorator(func: F) -> F:
        hooks = list(getattr(func, HOOK_MARKER, ()))
        hooks.append(key)
        setattr(func, HOOK_MARKER, tuple(hooks))
        return func

    return decorator
