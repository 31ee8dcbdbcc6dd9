import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-with-enough-length-for-hs256')

from clinicflow.database import Base, build_engine, build_session_factory  # noqa: E402
from clinicflow.main import create_app  # noqa: E402


@pytest.fixture
def engine():
    engine = build_engine('sqlite://')
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(engine):
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine=engine, auth_required=False)) as test_client:
        yield test_client
