#!/usr/bin/env python3
"""
Removable Example - sqlalchemy-removable

Demonstrates removing and restoring records:
- Registering models with default and custom marker columns
- Present / removed scopes
- Hooks around removal
- Validation on removal saves
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from removable import (
    RecordInvalid,
    Removable,
    RemovalAborted,
    ValidationRule,
    acts_as_removable,
    count_present,
    count_removed,
    marker_column,
    removal_callback,
)


class Base(DeclarativeBase):
    pass


@acts_as_removable
class Patient(Base, Removable):
    """Patient record, hidden instead of deleted."""

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True)
    patient_code: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20), default="enrolled")
    removed_at: Mapped[Optional[datetime]] = marker_column()

    @removal_callback("before_remove")
    def refuse_active_patients(self):
        if self.status == "in_treatment":
            raise RemovalAborted("patient is in treatment")

    @removal_callback("after_remove")
    def mark_withdrawn(self):
        print(f"  -> {self.patient_code} withdrawn")


@acts_as_removable(column_name="archived_at", validate=True)
class Visit(Base, Removable):
    """Visit record archived into a custom column, validated on archive."""

    __tablename__ = "patient_visits"
    __validations__ = {"visit_type": {ValidationRule.PRESENCE: True}}

    id: Mapped[int] = mapped_column(primary_key=True)
    visit_type: Mapped[Optional[str]] = mapped_column(String(50))
    archived_at: Mapped[Optional[datetime]] = marker_column()


def demonstrate_remove(session: Session) -> None:
    print("\n1. Removing and restoring")
    print("-" * 40)

    patient = Patient(patient_code="PT-001")
    session.add(patient)
    session.commit()

    patient.remove()
    print(f"  removed? {patient.is_removed()} at {patient.removed_at}")

    patient.unremove()
    print(f"  removed after unremove? {patient.is_removed()}")


def demonstrate_hooks(session: Session) -> None:
    print("\n2. Hooks")
    print("-" * 40)

    patient = Patient(patient_code="PT-002", status="in_treatment")
    session.add(patient)
    session.commit()

    print(f"  remove() returned {patient.remove()}")


def demonstrate_scopes(session: Session) -> None:
    print("\n3. Scopes")
    print("-" * 40)

    for code in ("PT-003", "PT-004"):
        session.add(Patient(patient_code=code))
    session.commit()

    newest = session.scalars(
        Patient.present().order_by(Patient.id.desc()).limit(1)
    ).one()
    session.commit()
    newest.remove_strict()

    print(f"  present: {count_present(session, Patient)}")
    print(f"  removed: {count_removed(session, Patient)}")


def demonstrate_validation(session: Session) -> None:
    print("\n4. Validation")
    print("-" * 40)

    visit = Visit()
    session.add(visit)
    session.commit()

    try:
        visit.remove_strict()
    except RecordInvalid as e:
        print(f"  refused: {e}")

    print(f"  skipping validation: {visit.remove(validate=False)}")


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    print("sqlalchemy-removable - Example")
    print("=" * 40)

    with Session(engine, expire_on_commit=False) as session:
        demonstrate_remove(session)
        demonstrate_hooks(session)
        demonstrate_scopes(session)
        demonstrate_validation(session)


if __name__ == "__main__":
    main()
