"""
EDAS Module - Services

EdasNotificationService owns the notification aggregate (notification, its
steps) and the status transition. EdasDocumentService stores step files
under UPLOAD_DIR/edas-documents and keeps rows and files in step.
"""
import math
import uuid
from collections.abc import Sequence
from pathlib import Path

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.config import settings
from src.core.database import unit_of_work
from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.core.logging import get_logger
from src.core.metrics import (
    record_document_uploaded,
    record_notification_created,
    record_step_transition,
)
from src.core.storage import LocalStorage
from src.modules.edas.models import (
    EdasCompany,
    EdasDocument,
    EdasNotification,
    EdasStatus,
    EdasStep,
)
from src.modules.edas.schemas import (
    CompanyStepsResponse,
    NotificationCreate,
    NotificationUpdate,
    StepDefinition,
)
from src.modules.edas.workflow import (
    REQUIRED_DOCUMENTS,
    STEP_NAMES,
    first_step,
    is_known_step,
    resolve_transition,
    step_order,
)

logger = get_logger(__name__)

DOCUMENT_FOLDER = "edas-documents"

ALLOWED_MIME_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    # AutoCAD
    "application/acad",
    "image/vnd.dwg",
    "application/dwg",
    "application/x-dwg",
})


def get_company_steps(company: EdasCompany) -> CompanyStepsResponse:
    """Step catalogue of a company in approval order."""
    documents = REQUIRED_DOCUMENTS[company]
    return CompanyStepsResponse(
        company=company,
        steps=[
            StepDefinition(
                step_type=step_type,
                name=STEP_NAMES[step_type],
                order=index,
                required_documents=list(documents.get(step_type, ())),
            )
            for index, step_type in enumerate(step_order(company), start=1)
        ],
    )


class EdasNotificationService:
    """Notification aggregate and step status transitions."""

    def __init__(self, db: AsyncSession, storage: LocalStorage | None = None):
        self.db = db
        self.storage = storage or LocalStorage()

    # ============== Notification Operations ==============

    async def get_notification(
        self,
        notification_id: uuid.UUID,
        for_update: bool = False,
    ) -> EdasNotification | None:
        """Get notification with steps and documents, always fresh from the database."""
        stmt = (
            select(EdasNotification)
            .options(selectinload(EdasNotification.steps).selectinload(EdasStep.documents))
            .where(EdasNotification.id == notification_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_notification_or_404(
        self,
        notification_id: uuid.UUID,
        for_update: bool = False,
    ) -> EdasNotification:
        notification = await self.get_notification(notification_id, for_update=for_update)
        if not notification:
            raise NotFoundError("EdasNotification", notification_id)
        return notification

    async def get_by_ref_no(self, ref_no: str) -> EdasNotification | None:
        result = await self.db.execute(
            select(EdasNotification).where(EdasNotification.ref_no == ref_no)
        )
        return result.scalar_one_or_none()

    async def list_notifications(
        self,
        company: EdasCompany | None = None,
        status: EdasStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[Sequence[EdasNotification], int, int]:
        """
        List notifications, newest first.

        Returns:
            (items, total, pages)
        """
        filters = []
        if company:
            filters.append(EdasNotification.company == company.value)
        if status:
            filters.append(EdasNotification.status == status.value)

        count_query = select(func.count(EdasNotification.id)).where(*filters)
        total = (await self.db.execute(count_query)).scalar() or 0

        stmt = (
            select(EdasNotification)
            .where(*filters)
            .order_by(EdasNotification.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(stmt)
        pages = math.ceil(total / page_size) if total else 0
        return result.scalars().all(), total, pages

    async def create_notification(
        self,
        data: NotificationCreate,
        created_by_id: uuid.UUID | None = None,
    ) -> EdasNotification:
        """Create a notification with its first step seeded as PENDING."""
        if await self.get_by_ref_no(data.ref_no):
            raise ConflictError(f"Notification with ref_no '{data.ref_no}' already exists")

        initial = first_step(data.company)
        notification = EdasNotification(
            **data.model_dump(exclude={"company"}),
            company=data.company.value,
            current_step=initial,
            status=EdasStatus.PENDING.value,
            created_by_id=created_by_id,
            steps=[
                EdasStep(
                    step_type=initial,
                    status=EdasStatus.PENDING.value,
                    notes="Notification created.",
                    documents=[],
                )
            ],
        )

        async with unit_of_work(self.db):
            self.db.add(notification)
            await self._flush_unique(data.ref_no)

        record_notification_created(notification.company)
        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            ref_no=notification.ref_no,
            company=notification.company,
            current_step=initial,
        )
        return notification

    async def update_notification(
        self,
        notification_id: uuid.UUID,
        data: NotificationUpdate,
    ) -> EdasNotification:
        """Update descriptive fields; ref_no must stay unique."""
        notification = await self.get_notification_or_404(notification_id)

        if data.ref_no and data.ref_no != notification.ref_no:
            if await self.get_by_ref_no(data.ref_no):
                raise ConflictError(f"Notification with ref_no '{data.ref_no}' already exists")

        update_data = data.model_dump(exclude_unset=True)
        for field in ("ref_no", "application_type", "customer_name"):
            # Required columns
            if field in update_data and update_data[field] is None:
                del update_data[field]

        async with unit_of_work(self.db):
            for field, value in update_data.items():
                setattr(notification, field, value)
            await self._flush_unique(notification.ref_no)

        logger.info(
            "Notification updated",
            notification_id=str(notification_id),
            fields=sorted(update_data),
        )
        return notification

    async def delete_notification(self, notification_id: uuid.UUID) -> None:
        """Delete notification with steps and documents, then their files."""
        notification = await self.get_notification_or_404(notification_id)
        paths = [document.path for step in notification.steps for document in step.documents]

        async with unit_of_work(self.db):
            await self.db.delete(notification)

        for path in paths:
            await run_in_threadpool(self.storage.delete, path)

        logger.info(
            "Notification deleted",
            notification_id=str(notification_id),
            ref_no=notification.ref_no,
            files=len(paths),
        )

    # ============== Step Operations ==============

    def ensure_known_step(self, notification: EdasNotification, step_type: str) -> None:
        if not is_known_step(notification.company, step_type):
            raise ValidationError(
                f"Unknown step '{step_type}' for {notification.company}",
                details={
                    "step_type": step_type,
                    "allowed": list(step_order(notification.company)),
                },
            )

    def get_or_create_step(self, notification: EdasNotification, step_type: str) -> EdasStep:
        """Return the step row, creating it (PENDING) if it does not exist yet."""
        for step in notification.steps:
            if step.step_type == step_type:
                return step

        step = EdasStep(
            notification_id=notification.id,
            step_type=step_type,
            status=EdasStatus.PENDING.value,
            documents=[],
        )
        notification.steps.append(step)
        return step

    async def update_step_status(
        self,
        notification_id: uuid.UUID,
        step_type: str,
        status: EdasStatus | str,
        notes: str | None = None,
    ) -> tuple[EdasStep, EdasNotification]:
        """
        Write a step status and advance the notification.

        The step row and the notification row are committed together; any
        failure rolls both back.

        Raises:
            NotFoundError: notification does not exist
            ValidationError: invalid status, or step not in the company's order
        """
        try:
            new_status = EdasStatus(status)
        except ValueError:
            raise ValidationError(
                f"Invalid status '{status}'",
                details={"allowed": [s.value for s in EdasStatus]},
            )

        async with unit_of_work(self.db):
            notification = await self.get_notification_or_404(notification_id, for_update=True)
            self.ensure_known_step(notification, step_type)

            step = self.get_or_create_step(notification, step_type)
            previous_status = step.status
            step.status = new_status.value
            if notes is not None:
                step.notes = notes

            transition = resolve_transition(
                notification.company,
                notification.current_step,
                notification.status,
                step_type,
                new_status,
            )
            notification.current_step = transition.current_step
            notification.status = transition.status.value
            await self.db.flush()

        record_step_transition(notification.company, new_status.value)
        logger.info(
            "Step transitioned",
            notification_id=str(notification_id),
            step_type=step_type,
            from_status=previous_status,
            to_status=new_status.value,
            current_step=notification.current_step,
            notification_status=notification.status,
        )

        notification = await self.get_notification_or_404(notification_id)
        return self._find_step(notification, step_type), notification

    async def set_step_ref_no(
        self,
        notification_id: uuid.UUID,
        step_type: str,
        ref_no: str,
    ) -> EdasStep:
        """Store the distribution company's reference number on a step."""
        async with unit_of_work(self.db):
            notification = await self.get_notification_or_404(notification_id, for_update=True)
            self.ensure_known_step(notification, step_type)
            step = self.get_or_create_step(notification, step_type)
            step.ref_no = ref_no
            await self.db.flush()

        logger.info(
            "Step reference set",
            notification_id=str(notification_id),
            step_type=step_type,
            ref_no=ref_no,
        )
        return step

    @staticmethod
    def _find_step(notification: EdasNotification, step_type: str) -> EdasStep:
        for step in notification.steps:
            if step.step_type == step_type:
                return step
        raise NotFoundError("EdasStep", step_type)

    async def _flush_unique(self, ref_no: str) -> None:
        """Flush, mapping a ref_no race with another writer to a conflict."""
        try:
            await self.db.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"Notification with ref_no '{ref_no}' already exists",
                details={"ref_no": ref_no},
            ) from e


class EdasDocumentService:
    """Files attached to notification steps."""

    def __init__(self, db: AsyncSession, storage: LocalStorage | None = None):
        self.db = db
        self.storage = storage or LocalStorage()
        self.notifications = EdasNotificationService(db, self.storage)

    async def list_documents(
        self,
        notification_id: uuid.UUID,
        step_type: str,
    ) -> Sequence[EdasDocument]:
        notification = await self.notifications.get_notification_or_404(notification_id)
        self.notifications.ensure_known_step(notification, step_type)
        for step in notification.steps:
            if step.step_type == step_type:
                return step.documents
        return []

    async def attach(
        self,
        notification_id: uuid.UUID,
        step_type: str,
        filename: str | None,
        content_type: str | None,
        data: bytes,
        document_type: str | None = None,
    ) -> EdasDocument:
        """
        Store an uploaded file and bind it to a step.

        The file is written first; if the database insert fails it is removed again.

        Raises:
            NotFoundError: notification does not exist
            ValidationError: missing/empty file, MIME type not allowed, file too large
        """
        notification = await self.notifications.get_notification_or_404(notification_id)
        self.notifications.ensure_known_step(notification, step_type)

        if not filename or not data:
            raise ValidationError("No file uploaded or file is empty")

        mime_type = (content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                f"File type '{mime_type or 'unknown'}' is not allowed",
                details={"mime_type": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )

        if len(data) > settings.max_upload_size_bytes:
            raise ValidationError(
                f"File exceeds the {settings.max_upload_size_mb} MB limit",
                details={"size": len(data), "limit": settings.max_upload_size_bytes},
            )

        key = await run_in_threadpool(self.storage.save_bytes, data, filename, DOCUMENT_FOLDER)

        try:
            async with unit_of_work(self.db):
                # Lock before creating the step; another writer may have added it meanwhile
                notification = await self.notifications.get_notification_or_404(
                    notification_id, for_update=True
                )
                step = self.notifications.get_or_create_step(notification, step_type)
                document = EdasDocument(
                    path=key,
                    mime_type=mime_type,
                    original_name=filename,
                    file_size=len(data),
                    document_type=document_type,
                )
                step.documents.append(document)
                await self.db.flush()
        except Exception:
            logger.error("Document insert failed, removing stored file", key=key)
            await run_in_threadpool(self.storage.delete, key)
            raise

        record_document_uploaded(notification.company, len(data))
        logger.info(
            "Document stored",
            notification_id=str(notification_id),
            step_type=step_type,
            document_id=str(document.id),
            key=key,
            size=len(data),
        )
        return document

    async def get_document(
        self,
        notification_id: uuid.UUID,
        step_type: str,
        document_id: uuid.UUID,
    ) -> EdasDocument:
        """Document scoped to its notification and step."""
        stmt = (
            select(EdasDocument)
            .join(EdasStep, EdasDocument.step_id == EdasStep.id)
            .where(
                EdasDocument.id == document_id,
                EdasStep.notification_id == notification_id,
                EdasStep.step_type == step_type,
            )
        )
        result = await self.db.execute(stmt)
        document = result.scalar_one_or_none()
        if not document:
            raise NotFoundError("EdasDocument", document_id)
        return document

    async def open_document(
        self,
        notification_id: uuid.UUID,
        step_type: str,
        document_id: uuid.UUID,
    ) -> tuple[EdasDocument, Path]:
        """Document row and absolute file path; 404 if either is missing."""
        document = await self.get_document(notification_id, step_type, document_id)
        exists = await run_in_threadpool(self.storage.exists, document.path)
        if not exists:
            logger.warning("Document file missing", document_id=str(document_id), key=document.path)
            raise NotFoundError("File", document.original_name)
        return document, self.storage.resolve(document.path)

    async def detach(
        self,
        notification_id: uuid.UUID,
        step_type: str,
        document_id: uuid.UUID,
    ) -> None:
        """Delete the row, then best-effort delete the file."""
        document = await self.get_document(notification_id, step_type, document_id)
        key = document.path

        async with unit_of_work(self.db):
            await self.db.delete(document)

        await run_in_threadpool(self.storage.delete, key)
        logger.info("Document removed", document_id=str(document_id), key=key)
