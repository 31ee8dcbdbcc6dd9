import pytest
from sqlalchemy import inspect, text

from clinicflow.core import config
from clinicflow.database import build_engine, build_session_factory, ensure_schema, transaction
from clinicflow.models.professional import Professional


def test_transaction_commits_when_block_succeeds(db) -> None:
    with transaction(db):
        db.add(Professional(name='Dra. Helena'))

    db.rollback()

    assert db.query(Professional).count() == 1


def test_transaction_rolls_back_and_reraises_on_error(db) -> None:
    with pytest.raises(RuntimeError):
        with transaction(db):
            db.add(Professional(name='Dra. Helena'))
            db.flush()
            raise RuntimeError('boom')

    assert db.query(Professional).count() == 0


def test_build_engine_enables_sqlite_foreign_keys(engine) -> None:
    with engine.connect() as connection:
        assert connection.execute(text('PRAGMA foreign_keys')).scalar() == 1


def test_ensure_schema_creates_tables_and_indexes_once() -> None:
    engine = build_engine('sqlite://')
    try:
        ensure_schema(engine)
        ensure_schema(engine)

        inspector = inspect(engine)
        assert {'pacientes', 'servicos', 'profissionais', 'agendamento_slots', 'agendamento_participantes'} <= set(
            inspector.get_table_names()
        )
        slot_indexes = {index['name'] for index in inspector.get_indexes('agendamento_slots')}
        assert 'idx_agendamento_slots_start' in slot_indexes

        db = build_session_factory(engine)()
        try:
            assert db.query(Professional).count() == 0
        finally:
            db.close()
    finally:
        engine.dispose()


def test_validate_runtime_config_rejects_default_secret_in_production(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'JWT_SECRET_KEY', 'change-me')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()


def test_validate_runtime_config_requires_admin_password_with_admin_email(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, 'ADMIN_EMAIL', 'admin@clinicflow.com')
    monkeypatch.setattr(config, 'ADMIN_PASSWORD', '')

    with pytest.raises(RuntimeError):
        config.validate_runtime_config()
