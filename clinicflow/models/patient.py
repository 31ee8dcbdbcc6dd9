"""Patient model definitions."""

from sqlalchemy import Column, Integer, String
from clinicflow.database import Base


class Patient(Base):
    """Represents a clinic patient."""
    __tablename__ = "pacientes"

    id = Column(Integer, primary_key=True)
    name = Column("nome", String, nullable=False, index=True)
    national_id = Column("cpf", String, nullable=False, unique=True)
    email = Column(String)
    phone = Column("telefone", String)
    address = Column("endereco", String)
    postal_code = Column("cep", String)
