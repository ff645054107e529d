"""
EDAS Module - FastAPI Dependencies
"""
from typing import Annotated

from fastapi import Depends

from src.core.database import AsyncSessionDep
from src.core.storage import LocalStorage, get_storage
from src.modules.edas.service import EdasDocumentService, EdasNotificationService


async def get_notification_service(
    db: AsyncSessionDep,
    storage: Annotated[LocalStorage, Depends(get_storage)],
) -> EdasNotificationService:
    """Get EdasNotificationService instance with injected session and storage."""
    return EdasNotificationService(db, storage)


async def get_document_service(
    db: AsyncSessionDep,
    storage: Annotated[LocalStorage, Depends(get_storage)],
) -> EdasDocumentService:
    return EdasDocumentService(db, storage)


# Type aliases
NotificationServiceDep = Annotated[EdasNotificationService, Depends(get_notification_service)]
DocumentServiceDep = Annotated[EdasDocumentService, Depends(get_document_service)]
