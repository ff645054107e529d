"""
EDAS Module - Pydantic Schemas (DTOs)

Alan adları snake_case; şirket değerleri "AYEDAŞ" / "BEDAŞ".
"""
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.modules.edas.models import EdasCompany, EdasStatus
from src.modules.edas.workflow import STEP_NAMES


# ============== Notification Schemas ==============

class NotificationBase(BaseModel):
    """Bildirim temel alanları."""
    model_config = ConfigDict(str_strip_whitespace=True)

    ref_no: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Başvuru referans numarası (benzersiz)",
        examples=["BD-1001"],
    )
    application_type: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Başvuru tipi",
        examples=["Yeni Bağlantı"],
    )
    customer_name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Müşteri adı",
        examples=["Yılmaz İnşaat A.Ş."],
    )
    project_name: str | None = Field(None, max_length=255, examples=["Kadıköy Konut Projesi"])
    city: str | None = Field(None, max_length=100, description="İl", examples=["İstanbul"])
    district: str | None = Field(None, max_length=100, description="İlçe", examples=["Kadıköy"])
    parcel_block: str | None = Field(None, max_length=50, description="Ada", examples=["1234"])
    parcel_no: str | None = Field(None, max_length=50, description="Parsel", examples=["5"])


class NotificationCreate(NotificationBase):
    """Yeni bildirim. İlk adım PENDING olarak otomatik oluşturulur."""
    company: EdasCompany = Field(..., description="Dağıtım şirketi", examples=["BEDAŞ"])


class NotificationUpdate(BaseModel):
    """
    Açıklayıcı alanların güncellenmesi.
    status, current_step ve company buradan değiştirilemez.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    ref_no: str | None = Field(None, min_length=1, max_length=100)
    application_type: str | None = Field(None, min_length=1, max_length=100)
    customer_name: str | None = Field(None, min_length=1, max_length=255)
    project_name: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    district: str | None = Field(None, max_length=100)
    parcel_block: str | None = Field(None, max_length=50)
    parcel_no: str | None = Field(None, max_length=50)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    step_id: uuid.UUID
    path: str
    mime_type: str
    original_name: str
    file_size: int
    document_type: str | None
    created_at: datetime


class StepResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    notification_id: uuid.UUID
    step_type: str
    status: EdasStatus
    notes: str | None
    ref_no: str | None
    documents: list[DocumentResponse] = []
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def step_name(self) -> str:
        return STEP_NAMES.get(self.step_type, self.step_type)


class NotificationResponse(BaseModel):
    """Bildirim, adımları ve belgeleriyle."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    ref_no: str
    company: EdasCompany
    application_type: str
    customer_name: str
    project_name: str | None
    city: str | None
    district: str | None
    parcel_block: str | None
    parcel_no: str | None
    current_step: str
    status: EdasStatus
    created_by_id: uuid.UUID | None
    steps: list[StepResponse] = []
    created_at: datetime
    updated_at: datetime


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int
    page: int
    page_size: int
    pages: int


# ============== Step Schemas ==============

class StepStatusUpdate(BaseModel):
    """Adım durumu güncelleme. notes verilmezse mevcut not korunur."""
    status: EdasStatus = Field(..., examples=["APPROVED"])
    notes: str | None = Field(None, max_length=5000, examples=["Proje onaylandı"])


class StepRefNoUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    ref_no: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Dağıtım şirketinin bu adım için verdiği referans numarası",
        examples=["AYD-2024-000123"],
    )


class StepUpdateResponse(BaseModel):
    """Güncellenen adım ve bildirimin yeni hali."""
    step: StepResponse
    notification: NotificationResponse


# ============== Catalogue Schemas ==============

class StepDefinition(BaseModel):
    step_type: str
    name: str
    order: int
    required_documents: list[str]


class CompanyStepsResponse(BaseModel):
    company: EdasCompany
    steps: list[StepDefinition]
