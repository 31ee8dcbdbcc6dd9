from datetime import datetime

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from clinicflow.models.appointment_slot import AppointmentSlot, SlotParticipant, SlotStatus
from clinicflow.models.professional import Professional
from clinicflow.models.service import Service
from clinicflow.routes.appointment_routes import (
    CreateSlotRequest,
    create_appointment_slot,
    delete_appointment_slot,
    get_appointment_slot,
)


def _slot_payload(**overrides) -> dict:
    payload = {
        'service_id': 1,
        'professional_id': 2,
        'start_time': '2024-01-01T10:00:00',
        'end_time': '2024-01-01T10:30:00',
        'status': 'scheduled',
        'participants': [],
    }
    payload.update(overrides)
    return payload


def _seed_clinic(client, patient_count: int) -> list[int]:
    client.post('/api/servicos', json={'name': 'Pilates', 'price': 120, 'duration_minutes': 30})
    client.post('/api/profissionais', json={'name': 'Carlos Reis', 'commission_percentage': 30})
    client.post('/api/profissionais', json={'name': 'Dra. Helena', 'commission_percentage': 40})

    patient_ids = []
    for index in range(1, patient_count + 1):
        response = client.post(
            '/api/pacientes',
            json={'name': f'Patient {index}', 'national_id': f'000.000.000-{index:02d}'},
        )
        assert response.status_code == 201
        patient_ids.append(response.json()['id'])
    return patient_ids


def test_create_slot_request_defaults_status_and_participants() -> None:
    request = CreateSlotRequest(
        service_id=1,
        professional_id=2,
        start_time=datetime(2024, 1, 1, 10, 0),
        end_time=datetime(2024, 1, 1, 10, 30),
    )

    assert request.status == SlotStatus.SCHEDULED
    assert request.participants == []


def test_create_slot_request_rejects_duplicate_participants() -> None:
    with pytest.raises(ValidationError):
        CreateSlotRequest(**_slot_payload(participants=[5, 5]))


@pytest.mark.parametrize('end_time', ['2024-01-01T10:00:00', '2024-01-01T09:30:00'])
def test_create_slot_request_rejects_end_not_after_start(end_time: str) -> None:
    with pytest.raises(ValidationError):
        CreateSlotRequest(**_slot_payload(end_time=end_time))


def test_create_slot_request_rejects_unknown_status() -> None:
    with pytest.raises(ValidationError):
        CreateSlotRequest(**_slot_payload(status='pending'))


def test_get_appointment_slot_returns_not_found_when_missing(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_appointment_slot(slot_id=999, db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Appointment slot not found.'


def test_delete_appointment_slot_returns_not_found_when_missing(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        delete_appointment_slot(slot_id=999, db=db)

    assert exception_info.value.status_code == 404


def test_create_appointment_slot_with_unknown_professional_fails_without_leftovers(db) -> None:
    service = Service(name='Pilates', capacity=1)
    db.add(service)
    db.commit()

    request = CreateSlotRequest(**_slot_payload(service_id=service.id, professional_id=9999))

    with pytest.raises(HTTPException) as exception_info:
        create_appointment_slot(data=request, db=db)

    assert exception_info.value.status_code == 500
    assert exception_info.value.detail == 'Could not create appointment slot.'
    assert db.query(AppointmentSlot).count() == 0


def test_create_appointment_slot_returns_created_slot(db) -> None:
    service = Service(name='Pilates', capacity=1)
    professional = Professional(name='Dra. Helena')
    db.add_all([service, professional])
    db.commit()

    request = CreateSlotRequest(**_slot_payload(service_id=service.id, professional_id=professional.id))
    response = create_appointment_slot(data=request, db=db)

    assert response.id is not None
    assert response.participants == []
    assert response.status == SlotStatus.SCHEDULED


def test_create_and_list_slot_with_participants(client) -> None:
    _seed_clinic(client, patient_count=7)

    response = client.post('/api/agendamentos', json=_slot_payload(participants=[5, 7]))

    assert response.status_code == 201
    created = response.json()
    assert created['id'] is not None
    assert [participant['id'] for participant in created['participants']] == [5, 7]

    listed = client.get('/api/agendamentos').json()
    assert len(listed) == 1
    assert listed[0]['id'] == created['id']
    assert listed[0]['participants'] == [
        {'id': 5, 'name': 'Patient 5'},
        {'id': 7, 'name': 'Patient 7'},
    ]


def test_create_slot_with_duplicate_participants_is_rejected_without_writes(client) -> None:
    _seed_clinic(client, patient_count=5)

    response = client.post('/api/agendamentos', json=_slot_payload(participants=[5, 5]))

    assert response.status_code == 422
    assert client.get('/api/agendamentos').json() == []


def test_create_slot_with_missing_patient_rolls_back(client) -> None:
    _seed_clinic(client, patient_count=3)

    response = client.post('/api/agendamentos', json=_slot_payload(participants=[1, 2, 42]))

    assert response.status_code == 500
    assert response.json() == {'detail': 'Could not create appointment slot.'}
    assert client.get('/api/agendamentos').json() == []


def test_list_reports_empty_participants_for_slot_without_attendees(client) -> None:
    _seed_clinic(client, patient_count=0)

    client.post('/api/agendamentos', json=_slot_payload())
    listed = client.get('/api/agendamentos').json()

    assert listed[0]['participants'] == []


def test_delete_slot_returns_deleted_record_and_removes_links(client, engine) -> None:
    _seed_clinic(client, patient_count=2)
    created = client.post('/api/agendamentos', json=_slot_payload(participants=[1, 2])).json()

    response = client.delete(f'/api/agendamentos/{created["id"]}')

    assert response.status_code == 200
    assert response.json() == created
    assert client.get(f'/api/agendamentos/{created["id"]}').status_code == 404
    assert client.delete(f'/api/agendamentos/{created["id"]}').status_code == 404

    with engine.connect() as connection:
        remaining = connection.execute(SlotParticipant.__table__.select()).all()
    assert remaining == []


def test_create_slot_request_converts_offsets_to_utc() -> None:
    request = CreateSlotRequest(
        **_slot_payload(start_time='2024-01-01T10:00:00-03:00', end_time='2024-01-01T10:30:00-03:00')
    )

    assert request.start_time == datetime(2024, 1, 1, 13, 0)
    assert request.end_time == datetime(2024, 1, 1, 13, 30)
    assert request.start_time.tzinfo is None


def test_create_slot_request_rejects_mixed_offset_and_naive_times() -> None:
    with pytest.raises(ValidationError):
        CreateSlotRequest(**_slot_payload(end_time='2024-01-01T10:30:00Z'))


def test_create_slot_with_mixed_offset_and_naive_times_is_rejected_without_writes(client) -> None:
    _seed_clinic(client, patient_count=0)

    response = client.post(
        '/api/agendamentos',
        json=_slot_payload(start_time='2024-01-01T10:00:00', end_time='2024-01-01T10:30:00Z'),
    )

    assert response.status_code == 422
    assert client.get('/api/agendamentos').json() == []


def test_list_orders_slots_created_with_different_offsets_by_utc_start(client) -> None:
    _seed_clinic(client, patient_count=0)

    sao_paulo = client.post(
        '/api/agendamentos',
        json=_slot_payload(start_time='2024-01-01T10:00:00-03:00', end_time='2024-01-01T10:30:00-03:00'),
    ).json()
    utc = client.post(
        '/api/agendamentos',
        json=_slot_payload(start_time='2024-01-01T12:00:00Z', end_time='2024-01-01T12:30:00Z'),
    ).json()

    listed = client.get('/api/agendamentos').json()

    assert [slot['id'] for slot in listed] == [utc['id'], sao_paulo['id']]
    assert listed[1]['start_time'] == '2024-01-01T13:00:00'
