"""
EDAŞ Bildirim Takibi - API Router

AYEDAŞ / BEDAŞ bağlantı başvurularının adım adım onay süreci.
Bir adım onaylanınca bildirim sıradaki adıma geçer; son adımın onayı
bildirimi APPROVED, herhangi bir adımın reddi REJECTED yapar.

Endpoint'ler:
- POST   /api/v1/edas/notifications                              - Bildirim oluştur
- GET    /api/v1/edas/notifications                              - Bildirim listesi
- GET    /api/v1/edas/notifications/{id}                         - Bildirim detayı
- PATCH  /api/v1/edas/notifications/{id}                         - Bildirim güncelle
- DELETE /api/v1/edas/notifications/{id}                         - Bildirim sil (admin/manager)
- PUT    /api/v1/edas/notifications/{id}/steps/{step}            - Adım durumu güncelle
- PUT    /api/v1/edas/notifications/{id}/steps/{step}/ref-no     - Adım referans no
- GET    /api/v1/edas/notifications/{id}/steps/{step}/documents  - Adım belgeleri
- POST   /api/v1/edas/notifications/{id}/steps/{step}/documents  - Belge yükle
- GET    /api/v1/edas/notifications/{id}/steps/{step}/documents/{doc_id} - Belge indir
- DELETE /api/v1/edas/notifications/{id}/steps/{step}/documents/{doc_id} - Belge sil
- GET    /api/v1/edas/companies/{company}/steps                  - Adım kataloğu
"""
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse

from src.modules.auth.dependencies import CurrentUser, require_role
from src.modules.edas.dependencies import DocumentServiceDep, NotificationServiceDep
from src.modules.edas.models import EdasCompany, EdasStatus
from src.modules.edas.schemas import (
    CompanyStepsResponse,
    DocumentResponse,
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdate,
    StepRefNoUpdate,
    StepResponse,
    StepStatusUpdate,
    StepUpdateResponse,
)
from src.modules.edas.service import get_company_steps

router = APIRouter(prefix="/edas", tags=["EDAŞ"])


# ============== Notifications ==============

@router.post(
    "/notifications",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Bildirim Oluştur",
    description="""
Yeni EDAŞ bildirimi oluşturur. Şirketin ilk adımı `PENDING` durumunda
otomatik açılır (BEDAŞ için `PROJE`, AYEDAŞ için `IC_TESISAT_PROJESI`).

`ref_no` benzersizdir; aynı numara tekrar gönderilirse **409** döner.
    """,
    responses={
        409: {"description": "Bu ref_no ile bildirim zaten var"},
    },
)
async def create_notification(
    data: NotificationCreate,
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> NotificationResponse:
    notification = await service.create_notification(data, created_by_id=current_user.id)
    return NotificationResponse.model_validate(notification)


@router.get(
    "/notifications",
    response_model=NotificationListResponse,
    summary="Bildirim Listesi",
)
async def list_notifications(
    current_user: CurrentUser,
    service: NotificationServiceDep,
    company: EdasCompany | None = Query(None, description="AYEDAŞ / BEDAŞ"),
    status_filter: EdasStatus | None = Query(None, alias="status", description="PENDING / APPROVED / REJECTED"),
    page: int = Query(1, ge=1, description="Sayfa numarası"),
    page_size: int = Query(20, ge=1, le=100, description="Sayfa başına kayıt"),
) -> NotificationListResponse:
    """Bildirimleri en yeniden eskiye listeler."""
    items, total, pages = await service.list_notifications(
        company=company,
        status=status_filter,
        page=page,
        page_size=page_size,
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        total=total,
        page=page,
        page_size=page_size,
        pages=pages,
    )


@router.get(
    "/notifications/{notification_id}",
    response_model=NotificationResponse,
    summary="Bildirim Detayı",
)
async def get_notification(
    notification_id: uuid.UUID,
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> NotificationResponse:
    """Bildirim, tüm adımları ve adımlara yüklenen belgelerle birlikte."""
    notification = await service.get_notification_or_404(notification_id)
    return NotificationResponse.model_validate(notification)


@router.patch(
    "/notifications/{notification_id}",
    response_model=NotificationResponse,
    summary="Bildirim Güncelle",
)
async def update_notification(
    notification_id: uuid.UUID,
    data: NotificationUpdate,
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> NotificationResponse:
    """Sadece açıklayıcı alanlar. Durum adımlar üzerinden değişir."""
    notification = await service.update_notification(notification_id, data)
    return NotificationResponse.model_validate(notification)


@router.delete(
    "/notifications/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Bildirim Sil",
    dependencies=[Depends(require_role(["manager"]))],
)
async def delete_notification(
    notification_id: uuid.UUID,
    service: NotificationServiceDep,
) -> None:
    """Bildirimi adımları, belgeleri ve dosyalarıyla siler. `admin` veya `manager` rolü."""
    await service.delete_notification(notification_id)


# ============== Steps ==============

@router.put(
    "/notifications/{notification_id}/steps/{step_type}",
    response_model=StepUpdateResponse,
    summary="Adım Durumu Güncelle",
    description="""
Adımın durumunu yazar ve bildirimi ilerletir:

| Yeni durum | Bildirime etkisi |
|------------|------------------|
| `APPROVED` (son adım değil) | `current_step` sıradaki adıma geçer |
| `APPROVED` (son adım) | `status` = `APPROVED` |
| `REJECTED` | `status` = `REJECTED`, süreç durur |
| `PENDING` | değişiklik yok |

Adım kaydı yoksa oluşturulur. `notes` gönderilmezse mevcut not korunur.
Adım ve bildirim tek transaction içinde yazılır.
    """,
)
async def update_step_status(
    notification_id: uuid.UUID,
    step_type: str,
    data: StepStatusUpdate,
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> StepUpdateResponse:
    step, notification = await service.update_step_status(
        notification_id,
        step_type,
        data.status,
        data.notes,
    )
    return StepUpdateResponse(
        step=StepResponse.model_validate(step),
        notification=NotificationResponse.model_validate(notification),
    )


@router.put(
    "/notifications/{notification_id}/steps/{step_type}/ref-no",
    response_model=StepResponse,
    summary="Adım Referans No",
)
async def set_step_ref_no(
    notification_id: uuid.UUID,
    step_type: str,
    data: StepRefNoUpdate,
    current_user: CurrentUser,
    service: NotificationServiceDep,
) -> StepResponse:
    """Dağıtım şirketinin bu adım için verdiği referans numarasını kaydeder."""
    step = await service.set_step_ref_no(notification_id, step_type, data.ref_no)
    return StepResponse.model_validate(step)


# ============== Documents ==============

@router.get(
    "/notifications/{notification_id}/steps/{step_type}/documents",
    response_model=list[DocumentResponse],
    summary="Adım Belgeleri",
)
async def list_documents(
    notification_id: uuid.UUID,
    step_type: str,
    current_user: CurrentUser,
    service: DocumentServiceDep,
) -> list[DocumentResponse]:
    documents = await service.list_documents(notification_id, step_type)
    return [DocumentResponse.model_validate(d) for d in documents]


@router.post(
    "/notifications/{notification_id}/steps/{step_type}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Belge Yükle",
    description="""
`multipart/form-data` ile tek dosya yükler.

- İzin verilen tipler: jpeg, png, gif, pdf, doc/docx, xls/xlsx, txt, dwg
- Maksimum boyut: `MAX_UPLOAD_SIZE_MB` (varsayılan 10 MB)
- `document_type`: adımın gerekli belge listesinden biri (opsiyonel)
    """,
)
async def upload_document(
    notification_id: uuid.UUID,
    step_type: str,
    current_user: CurrentUser,
    service: DocumentServiceDep,
    file: Annotated[UploadFile, File(description="Yüklenecek dosya")],
    document_type: Annotated[str | None, Form(max_length=255)] = None,
) -> DocumentResponse:
    data = await file.read()
    document = await service.attach(
        notification_id,
        step_type,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
        document_type=document_type,
    )
    return DocumentResponse.model_validate(document)


@router.get(
    "/notifications/{notification_id}/steps/{step_type}/documents/{document_id}",
    response_class=FileResponse,
    summary="Belge İndir",
    responses={404: {"description": "Belge kaydı veya dosyası bulunamadı"}},
)
async def download_document(
    notification_id: uuid.UUID,
    step_type: str,
    document_id: uuid.UUID,
    current_user: CurrentUser,
    service: DocumentServiceDep,
) -> FileResponse:
    document, path = await service.open_document(notification_id, step_type, document_id)
    return FileResponse(
        path,
        media_type=document.mime_type,
        filename=document.original_name,
    )


@router.delete(
    "/notifications/{notification_id}/steps/{step_type}/documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Belge Sil",
)
async def delete_document(
    notification_id: uuid.UUID,
    step_type: str,
    document_id: uuid.UUID,
    current_user: CurrentUser,
    service: DocumentServiceDep,
) -> None:
    """Kaydı siler; dosya zaten yoksa sadece loglanır."""
    await service.detach(notification_id, step_type, document_id)


# ============== Catalogue ==============

@router.get(
    "/companies/{company}/steps",
    response_model=CompanyStepsResponse,
    summary="Adım Kataloğu",
)
async def company_steps(company: EdasCompany, current_user: CurrentUser) -> CompanyStepsResponse:
    """Şirketin adım sırası, Türkçe adları ve gerekli belge listeleri."""
    return get_company_steps(company)
