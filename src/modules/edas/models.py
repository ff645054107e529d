"""
EDAS Module - Database Models

Grid-connection paperwork filed with the distribution companies:
- EdasNotification: one application (bildirim), owns its steps
- EdasStep: one stage of the company-specific approval sequence
- EdasDocument: a file uploaded against a step
"""
import uuid
from enum import Enum

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.models import Base


class EdasCompany(str, Enum):
    """Electricity distribution companies (EDAŞ)."""
    AYEDAS = "AYEDAŞ"
    BEDAS = "BEDAŞ"

    @classmethod
    def _missing_(cls, value):
        # ASCII slugs used in URLs: "ayedas", "BEDAS"
        if isinstance(value, str):
            key = value.strip().upper().replace("Ş", "S")
            for member in cls:
                if member.name == key:
                    return member
        return None


class EdasStatus(str, Enum):
    """Status shared by notifications and their steps."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class EdasNotification(Base):
    """
    EDAŞ notification (bildirim).

    `current_step` always holds a key from the company's step order;
    `status` becomes APPROVED when the last step is approved and
    REJECTED as soon as any step is rejected.
    """
    __tablename__ = "edas_notification"

    __table_args__ = (
        Index("idx_edas_notification_company_status", "company", "status"),
    )

    ref_no: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
        comment="Application reference number",
    )
    company: Mapped[str] = mapped_column(String(20), nullable=False, comment="AYEDAŞ/BEDAŞ")
    application_type: Mapped[str] = mapped_column(String(100), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Site details
    project_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)  # İl
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)  # İlçe
    parcel_block: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Ada
    parcel_no: Mapped[str | None] = mapped_column(String(50), nullable=True)  # Parsel

    current_step: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=EdasStatus.PENDING.value,
        nullable=False,
        index=True,
    )

    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
    )

    steps: Mapped[list["EdasStep"]] = relationship(
        "EdasStep",
        cascade="all, delete-orphan",
        order_by="EdasStep.created_at",
        lazy="selectin",
    )


class EdasStep(Base):
    """One (notification, step type) row; created lazily on first write."""
    __tablename__ = "edas_step"

    __table_args__ = (
        UniqueConstraint("notification_id", "step_type", name="uq_edas_step_notification_step_type"),
    )

    notification_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("edas_notification.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=EdasStatus.PENDING.value,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ref_no: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Reference number issued by the distribution company for this step",
    )

    documents: Mapped[list["EdasDocument"]] = relationship(
        "EdasDocument",
        cascade="all, delete-orphan",
        order_by="EdasDocument.created_at",
        lazy="selectin",
    )


class EdasDocument(Base):
    """Uploaded file bound to a step. `path` is relative to the upload root."""
    __tablename__ = "edas_document"

    step_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("edas_step.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    path: Mapped[str] = mapped_column(String(500), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(150), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    document_type: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Which required document this file satisfies",
    )
