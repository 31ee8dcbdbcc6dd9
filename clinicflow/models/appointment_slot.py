"""Appointment slot and participation model definitions."""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from clinicflow.database import Base
from clinicflow.models.patient import Patient


class SlotStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AppointmentSlot(Base):
    """Represents a scheduled block of time for a service and a professional."""
    __tablename__ = "agendamento_slots"

    id = Column(Integer, primary_key=True)
    service_id = Column("id_servico", Integer, ForeignKey("servicos.id"), nullable=False)
    professional_id = Column("id_profissional", Integer, ForeignKey("profissionais.id"), nullable=False)
    start_time = Column("data_hora_inicio", DateTime, nullable=False)
    end_time = Column("data_hora_fim", DateTime, nullable=False)
    status = Column(
        Enum(
            SlotStatus,
            name="slot_status",
            native_enum=False,
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=SlotStatus.SCHEDULED,
    )

    participants = relationship(
        "SlotParticipant",
        back_populates="slot",
        cascade="all, delete-orphan",
        order_by="SlotParticipant.id",
    )


class SlotParticipant(Base):
    """Links a patient to an appointment slot they attend."""
    __tablename__ = "agendamento_participantes"
    __table_args__ = (
        UniqueConstraint("id_agendamento_slot", "id_paciente", name="uq_agendamento_participante"),
    )

    id = Column(Integer, primary_key=True)
    slot_id = Column(
        "id_agendamento_slot",
        Integer,
        ForeignKey("agendamento_slots.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    patient_id = Column("id_paciente", Integer, ForeignKey("pacientes.id"), nullable=False)

    slot = relationship("AppointmentSlot", back_populates="participants")
    patient = relationship(Patient)
