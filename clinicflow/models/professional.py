"""Professional model definitions."""

from sqlalchemy import Column, Integer, Numeric, String
from clinicflow.database import Base


class Professional(Base):
    """Represents a professional who attends appointment slots."""
    __tablename__ = "profissionais"

    id = Column(Integer, primary_key=True)
    name = Column("nome", String, nullable=False, index=True)
    commission_percentage = Column("comissao_percentual", Numeric(5, 2))
