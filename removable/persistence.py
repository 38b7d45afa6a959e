"""
Save primitive and transactional mutation pipeline.

``save`` / ``save_strict`` are the host save operations removable models
persist through. ``run_mutation`` wraps hooks, marker assignment and save
in one transaction and reports a ``MutationResult``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import inspect
from sqlalchemy.orm import Session, SessionTransaction

from .config import SaveOptions, get_config
from .exceptions import RecordInvalid, RecordNotSaved, RemovableError
from .hooks import HookEvent, HookPhase
from .registry import RemovableBehavior
from .results import MutationResult
from .validation import validate_record

logger = logging.getLogger(__name__)


def session_for(record: Any, session: Optional[Session] = None) -> Session:
    """
    Session a record is persisted through.

    Raises:
        RemovableError: If no session was given and the record is detached
    """
    if session is not None:
        return session
    session = Session.object_session(record)
    if session is None:
        raise RemovableError(
            f"{type(record).__name__} is not attached to a session; pass session=",
            record=record,
        )
    return session


@contextmanager
def transaction(session: Session) -> Iterator[SessionTransaction]:
    """
    Open a transaction scoped to one operation.

    Starts and commits a transaction when the session has none in progress,
    otherwise uses a SAVEPOINT so only this operation rolls back on failure.
    """
    if session.in_transaction():
        with session.begin_nested() as savepoint:
            yield savepoint
    else:
        with session.begin() as root:
            yield root


def save_strict(
    record: Any, session: Optional[Session] = None, validate: bool = True
) -> None:
    """
    Validate and flush a record.

    Args:
        record: Mapped instance
        session: Session to use, defaults to the record's own
        validate: Run validation rules first

    Raises:
        RecordInvalid: If validation rules fail
    """
    session = session_for(record, session)
    if validate:
        result = validate_record(record)
        if not result.is_valid:
            raise RecordInvalid(record, result)
    session.add(record)
    session.flush()


def save(record: Any, session: Optional[Session] = None, validate: bool = True) -> bool:
    """
    Validate and flush a record.

    Returns:
        False if validation rules fail, True otherwise
    """
    try:
        save_strict(record, session, validate=validate)
    except RecordInvalid:
        return False
    return True


def run_mutation(
    record: Any,
    behavior: RemovableBehavior,
    event: HookEvent,
    value: Any,
    session: Optional[Session] = None,
    save_options: Optional[Dict[str, Any]] = None,
) -> MutationResult:
    """
    Assign the marker inside a transaction, firing hooks around the save.

    Args:
        record: Instance of a registered model
        behavior: The model's registered behavior
        event: Remove or unremove
        value: Marker value to assign
        session: Session to use, defaults to the record's own
        save_options: Caller overrides for the model's default save options

    Returns:
        MutationResult, failed when validation fails or a hook aborts.
        Other errors propagate after the transaction is rolled back.
    """
    session = session_for(record, session)
    key = type(record).marker_key()

    # Options are checked before anything touches the database.
    options: SaveOptions = behavior.options.save_options().merged(save_options or {})

    try:
        with transaction(session):
            behavior.hooks.run(HookPhase.BEFORE, event, record)
            setattr(record, key, value)
            save_strict(record, session, validate=options.run_validations)
            behavior.hooks.run(HookPhase.AFTER, event, record)
    except (RecordInvalid, RecordNotSaved) as exc:
        result = MutationResult.from_error(exc)
    else:
        result = MutationResult.success(record)

    if get_config().log_mutations:
        logger.debug(
            "%s %s(%s): %s",
            event.value,
            type(record).__name__,
            _identity(record),
            result.status.value,
        )
    return result


def _identity(record: Any) -> str:
    identity = inspect(record).identity
    if identity is None:
        return "new"
    return ", ".join(str(part) for part in identity)
