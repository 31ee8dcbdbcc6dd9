"""User model definitions."""

from sqlalchemy import Column, Integer, String
from clinicflow.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    name = Column("nome", String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column("senha_hash", String, nullable=False)
    role = Column("perfil", String, nullable=False, default="professional")  # admin/professional
