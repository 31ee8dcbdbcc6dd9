"""Typed CRUD helpers shared by the patient, service and professional routes."""

import logging
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from clinicflow.database import transaction
from clinicflow.models.patient import Patient
from clinicflow.models.professional import Professional
from clinicflow.models.service import Service

logger = logging.getLogger(__name__)

RecordT = TypeVar('RecordT', Patient, Service, Professional)


def list_records(db: Session, model: type[RecordT]) -> list[RecordT]:
    return db.query(model).order_by(model.name.asc(), model.id.asc()).all()


def get_record(db: Session, model: type[RecordT], record_id: int) -> RecordT | None:
    return db.get(model, record_id)


def create_record(db: Session, model: type[RecordT], values: dict[str, Any]) -> RecordT:
    record = model(**values)
    with transaction(db):
        db.add(record)
    db.refresh(record)
    logger.info('Created %s %s', model.__tablename__, record.id)
    return record


def update_record(db: Session, record: RecordT, values: dict[str, Any]) -> RecordT:
    with transaction(db):
        for field_name, value in values.items():
            setattr(record, field_name, value)
    db.refresh(record)
    return record


def delete_record(db: Session, record: RecordT) -> None:
    record_id = record.id
    with transaction(db):
        db.delete(record)
    logger.info('Deleted %s %s', record.__tablename__, record_id)
