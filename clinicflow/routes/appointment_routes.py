import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinicflow.database import get_db
from clinicflow.models.appointment_slot import AppointmentSlot, SlotStatus
from clinicflow.services import slots

router = APIRouter(tags=['appointments'])
logger = logging.getLogger(__name__)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class CreateSlotRequest(BaseModel):
    service_id: int
    professional_id: int
    start_time: datetime
    end_time: datetime
    status: SlotStatus = SlotStatus.SCHEDULED
    participants: list[int] = Field(default_factory=list)

    @field_validator('participants')
    @classmethod
    def validate_participants(cls, value: list[int]) -> list[int]:
        if len(set(value)) != len(value):
            raise ValueError('A patient can only be listed once per appointment slot.')
        return value

    @model_validator(mode='after')
    def validate_time_range(self) -> 'CreateSlotRequest':
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError('start_time and end_time must both include a UTC offset or both omit it.')

        self.start_time = to_naive_utc(self.start_time)
        self.end_time = to_naive_utc(self.end_time)
        if self.end_time <= self.start_time:
            raise ValueError('end_time must be after start_time.')
        return self


class ParticipantResponse(BaseModel):
    id: int
    name: str


class SlotResponse(BaseModel):
    id: int
    service_id: int
    professional_id: int
    start_time: datetime
    end_time: datetime
    status: SlotStatus
    participants: list[ParticipantResponse]


def serialize_slot(slot: AppointmentSlot) -> SlotResponse:
    return SlotResponse(
        id=slot.id,
        service_id=slot.service_id,
        professional_id=slot.professional_id,
        start_time=slot.start_time,
        end_time=slot.end_time,
        status=slot.status,
        participants=[
            ParticipantResponse(id=participant.patient.id, name=participant.patient.name)
            for participant in slot.participants
        ],
    )


@router.get('', response_model=list[SlotResponse])
def list_appointment_slots(db: Session = Depends(get_db)):
    try:
        return [serialize_slot(slot) for slot in slots.list_slots(db)]
    except SQLAlchemyError as exc:
        logger.exception('Failed to list appointment slots')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not fetch appointment slots.',
        ) from exc


@router.get('/{slot_id}', response_model=SlotResponse)
def get_appointment_slot(slot_id: int, db: Session = Depends(get_db)):
    slot = slots.get_slot(db, slot_id)
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Appointment slot not found.')
    return serialize_slot(slot)


@router.post('', response_model=SlotResponse, status_code=status.HTTP_201_CREATED)
def create_appointment_slot(data: CreateSlotRequest, db: Session = Depends(get_db)):
    try:
        slot = slots.create_slot(
            db,
            service_id=data.service_id,
            professional_id=data.professional_id,
            start_time=data.start_time,
            end_time=data.end_time,
            status=data.status,
            participant_ids=data.participants,
        )
    except SQLAlchemyError as exc:
        logger.exception(
            'Failed to create appointment slot for professional %s; transaction rolled back',
            data.professional_id,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not create appointment slot.',
        ) from exc

    return serialize_slot(slot)


@router.delete('/{slot_id}', response_model=SlotResponse)
def delete_appointment_slot(slot_id: int, db: Session = Depends(get_db)):
    slot = slots.get_slot(db, slot_id)
    if slot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Appointment slot not found.')

    deleted = serialize_slot(slot)

    try:
        slots.delete_slot(db, slot)
    except SQLAlchemyError as exc:
        logger.exception('Failed to delete appointment slot %s', slot_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not delete appointment slot.',
        ) from exc

    return deleted
