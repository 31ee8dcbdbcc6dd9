import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinicflow.database import get_db
from clinicflow.models.patient import Patient
from clinicflow.services import records

router = APIRouter(tags=['patients'])
logger = logging.getLogger(__name__)


class PatientRequest(BaseModel):
    name: str
    national_id: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    postal_code: str | None = None

    @field_validator('name', 'national_id')
    @classmethod
    def validate_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower() or None


class PatientResponse(BaseModel):
    id: int
    name: str
    national_id: str
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    postal_code: str | None = None

    class Config:
        from_attributes = True


def get_patient_or_404(patient_id: int, db: Session) -> Patient:
    patient = records.get_record(db, Patient, patient_id)
    if patient is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Patient not found.')
    return patient


@router.get('', response_model=list[PatientResponse])
def list_patients(db: Session = Depends(get_db)):
    try:
        return records.list_records(db, Patient)
    except SQLAlchemyError as exc:
        logger.exception('Failed to list patients')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not fetch patients.',
        ) from exc


@router.get('/{patient_id}', response_model=PatientResponse)
def get_patient(patient_id: int, db: Session = Depends(get_db)):
    return get_patient_or_404(patient_id, db)


@router.post('', response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(data: PatientRequest, db: Session = Depends(get_db)):
    try:
        return records.create_record(db, Patient, data.model_dump())
    except IntegrityError as exc:
        logger.warning('Rejected patient with duplicate national id')
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A patient with this national id already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to create patient')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not create patient.',
        ) from exc


@router.put('/{patient_id}', response_model=PatientResponse)
def update_patient(patient_id: int, data: PatientRequest, db: Session = Depends(get_db)):
    patient = get_patient_or_404(patient_id, db)

    try:
        return records.update_record(db, patient, data.model_dump())
    except IntegrityError as exc:
        logger.warning('Rejected update of patient %s with duplicate national id', patient_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='A patient with this national id already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to update patient %s', patient_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not update patient.',
        ) from exc


@router.delete('/{patient_id}', response_model=PatientResponse)
def delete_patient(patient_id: int, db: Session = Depends(get_db)):
    patient = get_patient_or_404(patient_id, db)
    deleted = PatientResponse.model_validate(patient)

    try:
        records.delete_record(db, patient)
    except IntegrityError as exc:
        logger.warning('Rejected deletion of patient %s still linked to appointment slots', patient_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='Patient is still linked to appointment slots.',
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to delete patient %s', patient_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not delete patient.',
        ) from exc

    return deleted
