"""Appointment slot creation, retrieval and deletion.

A slot and its participant links are written as one unit: either the slot and
every link are committed together, or the transaction is rolled back and
nothing is left behind.
"""

import logging
from datetime import datetime
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from clinicflow.database import transaction
from clinicflow.models.appointment_slot import AppointmentSlot, SlotParticipant, SlotStatus

logger = logging.getLogger(__name__)


def _slot_query():
    return select(AppointmentSlot).options(
        selectinload(AppointmentSlot.participants).selectinload(SlotParticipant.patient)
    )


def list_slots(db: Session) -> list[AppointmentSlot]:
    query = _slot_query().order_by(AppointmentSlot.start_time.asc(), AppointmentSlot.id.asc())
    return list(db.scalars(query).all())


def get_slot(db: Session, slot_id: int) -> AppointmentSlot | None:
    query = _slot_query().where(AppointmentSlot.id == slot_id).execution_options(populate_existing=True)
    return db.scalars(query).first()


def create_slot(
    db: Session,
    *,
    service_id: int,
    professional_id: int,
    start_time: datetime,
    end_time: datetime,
    status: SlotStatus = SlotStatus.SCHEDULED,
    participant_ids: Iterable[int] = (),
) -> AppointmentSlot:
    participant_ids = list(participant_ids)

    with transaction(db):
        slot = AppointmentSlot(
            service_id=service_id,
            professional_id=professional_id,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        db.add(slot)
        db.flush()

        for patient_id in participant_ids:
            db.add(SlotParticipant(slot_id=slot.id, patient_id=patient_id))
            db.flush()

        slot_id = slot.id

    logger.info('Created appointment slot %s with %d participants', slot_id, len(participant_ids))
    return get_slot(db, slot_id)


def delete_slot(db: Session, slot: AppointmentSlot) -> None:
    slot_id = slot.id
    with transaction(db):
        db.delete(slot)
    logger.info('Deleted appointment slot %s', slot_id)
