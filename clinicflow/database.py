from contextlib import contextmanager
from threading import Lock
from typing import Iterator
from weakref import WeakSet

from fastapi import Request
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()

_schema_lock = Lock()
_schema_checked: WeakSet = WeakSet()

SCHEMA_INDEXES = {
    'agendamento_slots': [
        'CREATE INDEX IF NOT EXISTS idx_agendamento_slots_start ON agendamento_slots(data_hora_inicio)',
        'CREATE INDEX IF NOT EXISTS idx_agendamento_slots_profissional_start '
        'ON agendamento_slots(id_profissional, data_hora_inicio)',
    ],
    'agendamento_participantes': [
        'CREATE INDEX IF NOT EXISTS idx_agendamento_participantes_paciente '
        'ON agendamento_participantes(id_paciente)',
    ],
}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def build_engine(database_url: str) -> Engine:
    """Create the engine for ``database_url``.

    SQLite connections get foreign keys switched on, otherwise participant
    links would neither be checked nor cascade with their slot. An in-memory
    SQLite URL shares one connection so every session sees the same data.
    """
    if not database_url.startswith('sqlite'):
        return create_engine(database_url, pool_pre_ping=True)

    options = {'connect_args': {'check_same_thread': False}}
    if ':memory:' in database_url or database_url in {'sqlite://', 'sqlite:///'}:
        options['poolclass'] = StaticPool

    engine = create_engine(database_url, **options)
    event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Run a unit of work on ``db``: commit if the block succeeds, roll back
    and re-raise if anything in it fails."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def ensure_schema(engine: Engine) -> None:
    if engine in _schema_checked:
        return

    with _schema_lock:
        if engine in _schema_checked:
            return

        Base.metadata.create_all(bind=engine)
        existing_tables = set(inspect(engine).get_table_names())

        with engine.begin() as connection:
            for table_name, statements in SCHEMA_INDEXES.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        _schema_checked.add(engine)
