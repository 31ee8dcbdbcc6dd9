import logging

from sqlalchemy.orm import Session

from clinicflow.auth.passwords import hash_password, verify_password
from clinicflow.database import transaction
from clinicflow.models.user import User

logger = logging.getLogger(__name__)

USER_ROLES = {'admin', 'professional'}


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def create_user(db: Session, *, name: str, email: str, password: str, role: str = 'professional') -> User:
    normalized_email = email.strip().lower()
    if not normalized_email or not password:
        raise ValueError('Email and password are required.')
    if role not in USER_ROLES:
        raise ValueError(f'Role must be one of: {", ".join(sorted(USER_ROLES))}.')
    if get_user_by_email(db, normalized_email) is not None:
        raise ValueError('Email is already registered.')

    user = User(
        name=name.strip() or normalized_email,
        email=normalized_email,
        hashed_password=hash_password(password),
        role=role,
    )
    with transaction(db):
        db.add(user)
    db.refresh(user)
    return user


def ensure_admin_user(db: Session, *, name: str, email: str, password: str) -> User | None:
    if not email:
        return None

    existing = get_user_by_email(db, email)
    if existing is not None:
        return existing

    user = create_user(db, name=name, email=email, password=password, role='admin')
    logger.info('Created bootstrap admin user %s', user.email)
    return user
