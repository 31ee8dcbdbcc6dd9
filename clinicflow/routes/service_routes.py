import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinicflow.database import get_db
from clinicflow.models.service import Service
from clinicflow.services import records

router = APIRouter(tags=['services'])
logger = logging.getLogger(__name__)


class ServiceRequest(BaseModel):
    name: str
    price: float | None = Field(default=None, ge=0)
    duration_minutes: int | None = Field(default=None, gt=0)
    capacity: int = Field(default=1, ge=1)

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Service name is required.')
        return normalized


class ServiceResponse(BaseModel):
    id: int
    name: str
    price: float | None = None
    duration_minutes: int | None = None
    capacity: int

    class Config:
        from_attributes = True


def get_service_or_404(service_id: int, db: Session) -> Service:
    service = records.get_record(db, Service, service_id)
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Service not found.')
    return service


@router.get('', response_model=list[ServiceResponse])
def list_services(db: Session = Depends(get_db)):
    try:
        return records.list_records(db, Service)
    except SQLAlchemyError as exc:
        logger.exception('Failed to list services')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not fetch services.',
        ) from exc


@router.get('/{service_id}', response_model=ServiceResponse)
def get_service(service_id: int, db: Session = Depends(get_db)):
    return get_service_or_404(service_id, db)


@router.post('', response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(data: ServiceRequest, db: Session = Depends(get_db)):
    try:
        return records.create_record(db, Service, data.model_dump())
    except SQLAlchemyError as exc:
        logger.exception('Failed to create service')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not create service.',
        ) from exc


@router.put('/{service_id}', response_model=ServiceResponse)
def update_service(service_id: int, data: ServiceRequest, db: Session = Depends(get_db)):
    service = get_service_or_404(service_id, db)

    try:
        return records.update_record(db, service, data.model_dump())
    except SQLAlchemyError as exc:
        logger.exception('Failed to update service %s', service_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not update service.',
        ) from exc


@router.delete('/{service_id}', response_model=ServiceResponse)
def delete_service(service_id: int, db: Session = Depends(get_db)):
    service = get_service_or_404(service_id, db)
    deleted = ServiceResponse.model_validate(service)

    try:
        records.delete_record(db, service)
    except IntegrityError as exc:
        logger.warning('Rejected deletion of service %s still referenced by appointment slots', service_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='Service is still referenced by appointment slots.',
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception('Failed to delete service %s', service_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Could not delete service.',
        ) from exc

    return deleted
