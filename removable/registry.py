"""
Registry of removable models.

Each registered class maps to a ``RemovableBehavior`` holding its options
and hook chains. Lookups are by exact class, so subclasses never inherit
another model's configuration.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Type

from .config import RemovableOptions
from .exceptions import NotRemovableError
from .hooks import HookChains

logger = logging.getLogger(__name__)


@dataclass
class RemovableBehavior:
    """Configuration and hooks attached to one model."""

    model: type
    options: RemovableOptions
    hooks: HookChains = field(default_factory=HookChains)


class RemovableRegistry:
    """Maps model classes to their removable behavior."""

    def __init__(self) -> None:
        self._behaviors: Dict[type, RemovableBehavior] = {}
        self._lock = threading.Lock()

    def register(self, model: type, options: RemovableOptions) -> RemovableBehavior:
        """
        Register a model, or update the options of a registered one.

        Hooks already registered for the model are kept.

        Args:
            model: Mapped class
            options: Frozen removal options

        Returns:
            The model's behavior
        """
        with self._lock:
            behavior = self._behaviors.get(model)
            if behavior is None:
                behavior = RemovableBehavior(model=model, options=options)
                self._behaviors[model] = behavior
                logger.debug(
                    "Registered %s as removable (column=%s, validate=%s)",
                    model.__name__,
                    options.column_name,
                    options.validate_on_remove,
                )
            else:
                behavior.options = options
                logger.debug(
                    "Updated removable options of %s (column=%s, validate=%s)",
                    model.__name__,
                    options.column_name,
                    options.validate_on_remove,
                )
            return behavior

    def unregister(self, model: type) -> None:
        with self._lock:
            self._behaviors.pop(model, None)

    def lookup(self, model: type) -> Optional[RemovableBehavior]:
        return self._behaviors.get(model)

    def behavior_for(self, model: type) -> RemovableBehavior:
        """
        Get the behavior of a registered model.

        Raises:
            NotRemovableError: If the model was never registered
        """
        behavior = self._behaviors.get(model)
        if behavior is None:
            raise NotRemovableError(model)
        return behavior

    def is_registered(self, model: type) -> bool:
        return model in self._behaviors

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._behaviors))

    def __len__(self) -> int:
        return len(self._behaviors)


# Global registry instance
_registry: Optional[RemovableRegistry] = None


def get_registry() -> RemovableRegistry:
    """Get global registry instance."""
    global _registry
    if _registry is None:
        _registry = RemovableRegistry()
    return _registry


def removable_models(registry: Optional[RemovableRegistry] = None) -> Iterator[Type]:
    """Iterate over every registered model class."""
    if registry is None:
        registry = get_registry()
    return iter(registry)
