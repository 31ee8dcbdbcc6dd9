"""Service model definitions."""

from sqlalchemy import Column, Integer, Numeric, String
from clinicflow.database import Base


class Service(Base):
    """Represents a service offered by the clinic."""
    __tablename__ = "servicos"

    id = Column(Integer, primary_key=True)
    name = Column("nome", String, nullable=False, index=True)
    price = Column("preco", Numeric(10, 2))
    duration_minutes = Column("duracao_minutos", Integer)
    capacity = Column("capacidade", Integer, nullable=False, default=1)
