import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinicflow.database import get_db
from clinicflow.models.professional import Professional
from clinicflow.services import records

router = APIRouter(tags=['professionals'])
logger = logging.getLogger(__name__)


class ProfessionalRequest(BaseModel):
    name: str
    commission_percentage: float | None = Field(default=None, ge=0, le=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Professional name is required.')
        return normalized


class ProfessionalResponse(BaseModel):
    id: int
    name: str
    commission_percentage: float | None = None

    class Config:
        from_attributes = True


def get_professional_or_404(professional_id: int, db: Session) -> Professional:
    professional = records.get_record(db, Professional, professional_id)
    if professional is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Professional not found.')
    return professional


@router.get('', response_model=list[ProfessionalResponse])
def list_professionals(db: Session = Depends(get_db)):
    try:
        return records.list_records(db, Professional)
    except SQLAlchemyError as exc:
        logger.exception('Failed to list professionals')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not fetch professionals.',
        ) from exc


@router.get('/{professional_id}', response_model=ProfessionalResponse)
def get_professional(professional_id: int, db: Session = Depends(get_db)):
    return get_professional_or_404(professional_id, db)


@router.post('', response_model=ProfessionalResponse, status_code=status.HTTP_201_CREATED)
def create_professional(data: ProfessionalRequest, db: Session = Depends(get_db)):
    try:
        return records.create_record(db, Professional, data.model_dump())
    except SQLAlchemyError as exc:
        logger.exception('Failed to create professional')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not create professional.',
        ) from exc


@router.put('/{professional_id}', response_model=ProfessionalResponse)
def update_professional(professional_id: int, data: ProfessionalRequest, db: Session = Depends(get_db)):
    professional = get_professional_or_404(professional_id, db)

    try:
        return records.update_record(db, professional, data.model_dump())
    except SQLAlchemyError as exc:
        logger.exception('Failed to update professional %s', professional_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not update professional.',
        ) from exc


@router.delete('/{professional_id}', response_model=ProfessionalResponse)
def delete_professional(professional_id: int, db: Session = Depends(get_db)):
    professional = get_professional_or_404(professional_id, db)
    deleted = ProfessionalResponse.model_validate(professional)

    try:
        records.delete_record(db, professional)
    except IntegrityError as exc:
        logger.warning(
            'Rejected deletion of professional %s still assigned to appointment slots',
            professional_id,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='Professional is still assigned to appointment slots.',
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to delete professional %s', professional_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not delete professional.',
        ) from exc

    return deleted
