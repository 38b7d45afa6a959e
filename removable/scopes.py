"""
Query scopes for removable models.

Scopes are predicate fragments; the ``select_*`` helpers wrap them in a
``Select`` that callers keep refining (ordering, pagination, joins) before
executing it themselves.
"""

from typing import Any, Tuple, Type, TypeVar

from sqlalchemy import ColumnElement, Select, func, inspect, select
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import InstrumentedAttribute, Session

from .exceptions import RemovableConfigurationError

T = TypeVar("T")


def resolve_marker(
    model: type, column_name: str
) -> Tuple[str, InstrumentedAttribute[Any]]:
    """
    Find the mapped attribute backing a marker column.

    Args:
        model: Mapped class
        column_name: Attribute key or database column name

    Returns:
        Tuple of (attribute key, instrumented attribute)

    Raises:
        RemovableConfigurationError: If the class is unmapped or has no such column
    """
    try:
        mapper = inspect(model)
    except NoInspectionAvailable as exc:
        raise RemovableConfigurationError(
            f"{model.__name__} is not a mapped class"
        ) from exc

    if column_name in mapper.column_attrs:
        key = column_name
    else:
        for column in mapper.columns:
            if column.name == column_name:
                key = mapper.get_property_by_column(column).key
                break
        else:
            raise RemovableConfigurationError(
                f"{model.__name__} has no column {column_name!r} to store removal in"
            )

    return key, getattr(model, key)


def marker_attribute(model: type) -> InstrumentedAttribute[Any]:
    """Instrumented marker attribute of a registered model."""
    return getattr(model, model.marker_key())


def present_criteria(model: type) -> ColumnElement[bool]:
    """Predicate selecting rows whose marker is NULL."""
    return marker_attribute(model).is_(None)


def removed_criteria(model: type) -> ColumnElement[bool]:
    """Predicate selecting rows whose marker is not NULL."""
    return marker_attribute(model).is_not(None)


def select_present(model: Type[T]) -> Select[Tuple[T]]:
    return select(model).where(present_criteria(model))


def select_removed(model: Type[T]) -> Select[Tuple[T]]:
    return select(model).where(removed_criteria(model))


def count(session: Session, statement: Select[Any]) -> int:
    """Count the rows a statement would return."""
    return session.scalar(
        select(func.count()).select_from(statement.order_by(None).subquery())
    ) or 0


def count_present(session: Session, model: type) -> int:
    return count(session, select_present(model))


def count_removed(session: Session, model: type) -> int:
    return count(session, select_removed(model))
