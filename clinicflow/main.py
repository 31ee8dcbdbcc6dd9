import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from clinicflow.auth.dependencies import get_current_user
from clinicflow.core import config
from clinicflow.database import build_engine, build_session_factory, ensure_schema
from clinicflow.models import appointment_slot, patient, professional, service, user  # noqa: F401
from clinicflow.routes import (
    appointment_routes,
    auth_routes,
    patient_routes,
    professional_routes,
    service_routes,
)
from clinicflow.services.users import ensure_admin_user

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def create_app(engine: Engine | None = None, auth_required: bool | None = None) -> FastAPI:
    if engine is None:
        engine = build_engine(config.DATABASE_URL)
    if auth_required is None:
        auth_required = config.AUTH_REQUIRED

    session_factory = build_session_factory(engine)

    app = FastAPI(title='ClinicFlow API')
    app.state.engine = engine
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials='*' not in config.CORS_ALLOW_ORIGINS,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.on_event('startup')
    def initialize_database() -> None:
        config.validate_runtime_config()
        try:
            ensure_schema(engine)
            db = session_factory()
            try:
                ensure_admin_user(
                    db,
                    name=config.ADMIN_NAME,
                    email=config.ADMIN_EMAIL,
                    password=config.ADMIN_PASSWORD,
                )
            finally:
                db.close()
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

    @app.get('/')
    def root():
        return {'status': 'ClinicFlow API Running'}

    protected = [Depends(get_current_user)] if auth_required else []
    if not auth_required:
        logger.warning('AUTH_REQUIRED is off; resource routes are not protected.')

    app.include_router(auth_routes.router, prefix='/api/auth')
    app.include_router(patient_routes.router, prefix='/api/pacientes', dependencies=protected)
    app.include_router(service_routes.router, prefix='/api/servicos', dependencies=protected)
    app.include_router(professional_routes.router, prefix='/api/profissionais', dependencies=protected)
    app.include_router(appointment_routes.router, prefix='/api/agendamentos', dependencies=protected)

    return app


configure_logging()
app = create_app()
