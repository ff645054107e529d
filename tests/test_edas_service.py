"""
EDAS service tests - notification aggregate and status transitions.
"""
import uuid

import pytest

from src.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.modules.edas.models import EdasCompany, EdasStatus, EdasStep
from src.modules.edas.schemas import NotificationCreate, NotificationUpdate
from src.modules.edas.service import EdasDocumentService, EdasNotificationService
from src.modules.edas.workflow import STEP_ORDER


@pytest.fixture
def service(db_session, storage) -> EdasNotificationService:
    return EdasNotificationService(db_session, storage)


@pytest.fixture
async def bedas_id(service, bedas_payload):
    notification = await service.create_notification(NotificationCreate(**bedas_payload))
    return notification.id


@pytest.mark.asyncio
async def test_create_seeds_first_step(service, bedas_id):
    notification = await service.get_notification(bedas_id)

    assert notification.company == EdasCompany.BEDAS.value
    assert notification.current_step == "PROJE"
    assert notification.status == EdasStatus.PENDING.value
    assert len(notification.steps) == 1
    step = notification.steps[0]
    assert step.step_type == "PROJE"
    assert step.status == EdasStatus.PENDING.value
    assert step.notes == "Notification created."


@pytest.mark.asyncio
async def test_duplicate_ref_no_conflicts(service, bedas_id, bedas_payload):
    with pytest.raises(ConflictError):
        await service.create_notification(NotificationCreate(**bedas_payload))

    _, total, _ = await service.list_notifications()
    assert total == 1


@pytest.mark.asyncio
async def test_approve_moves_pointer_and_keeps_status(service, bedas_id):
    step, notification = await service.update_step_status(
        bedas_id, "PROJE", EdasStatus.APPROVED, "Proje onaylandı"
    )

    assert step.status == EdasStatus.APPROVED.value
    assert step.notes == "Proje onaylandı"
    assert notification.current_step == "BAGLANTI_GORUSU"
    assert notification.status == EdasStatus.PENDING.value


@pytest.mark.asyncio
async def test_approving_every_step_approves_notification(service, bedas_id):
    for step_type in STEP_ORDER[EdasCompany.BEDAS]:
        _, notification = await service.update_step_status(bedas_id, step_type, "APPROVED")

    assert notification.status == EdasStatus.APPROVED.value
    assert notification.current_step == "FEN_MUAYENE"
    assert len(notification.steps) == len(STEP_ORDER[EdasCompany.BEDAS])


@pytest.mark.asyncio
async def test_reject_after_approvals(service, bedas_id):
    await service.update_step_status(bedas_id, "PROJE", "APPROVED")
    await service.update_step_status(bedas_id, "BAGLANTI_GORUSU", "APPROVED")

    step, notification = await service.update_step_status(
        bedas_id, "DAGITIM_BAGLANTI_ANLASMASI", "REJECTED", "Eksik evrak"
    )

    assert step.status == EdasStatus.REJECTED.value
    assert notification.status == EdasStatus.REJECTED.value
    # Approved siblings are left as they were
    statuses = {s.step_type: s.status for s in notification.steps}
    assert statuses["PROJE"] == EdasStatus.APPROVED.value
    assert statuses["BAGLANTI_GORUSU"] == EdasStatus.APPROVED.value


@pytest.mark.asyncio
async def test_rejected_notification_records_step_but_does_not_move(service, bedas_id):
    await service.update_step_status(bedas_id, "PROJE", "REJECTED")

    step, notification = await service.update_step_status(bedas_id, "PROJE", "APPROVED")

    assert step.status == EdasStatus.APPROVED.value
    assert notification.status == EdasStatus.REJECTED.value
    assert notification.current_step == "PROJE"


@pytest.mark.asyncio
async def test_notes_kept_when_not_given(service, bedas_id):
    step, _ = await service.update_step_status(bedas_id, "PROJE", "PENDING")
    assert step.notes == "Notification created."


@pytest.mark.asyncio
async def test_unknown_notification(service):
    with pytest.raises(NotFoundError):
        await service.update_step_status(uuid.uuid4(), "PROJE", "APPROVED")


@pytest.mark.asyncio
async def test_invalid_status(service, bedas_id):
    with pytest.raises(ValidationError):
        await service.update_step_status(bedas_id, "PROJE", "DONE")


@pytest.mark.asyncio
async def test_step_of_other_company_rejected(service, bedas_id):
    with pytest.raises(ValidationError):
        await service.update_step_status(bedas_id, "IC_TESISAT_PROJESI", "APPROVED")

    notification = await service.get_notification(bedas_id)
    assert [s.step_type for s in notification.steps] == ["PROJE"]


@pytest.mark.asyncio
async def test_failed_transition_rolls_back_step_and_notification(service, bedas_id, monkeypatch):
    def broken_transition(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr("src.modules.edas.service.resolve_transition", broken_transition)

    with pytest.raises(RuntimeError):
        await service.update_step_status(bedas_id, "PROJE", "APPROVED")

    monkeypatch.undo()
    notification = await service.get_notification(bedas_id)
    assert notification.current_step == "PROJE"
    assert notification.status == EdasStatus.PENDING.value
    assert notification.steps[0].status == EdasStatus.PENDING.value


@pytest.mark.asyncio
async def test_set_step_ref_no_creates_step(service, bedas_id):
    step = await service.set_step_ref_no(bedas_id, "BAGLANTI_GORUSU", "BDS-2024-77")

    assert step.ref_no == "BDS-2024-77"
    assert step.status == EdasStatus.PENDING.value
    notification = await service.get_notification(bedas_id)
    assert notification.current_step == "PROJE"
    assert {s.step_type for s in notification.steps} == {"PROJE", "BAGLANTI_GORUSU"}


@pytest.mark.asyncio
async def test_update_descriptive_fields(service, bedas_id, ayedas_payload):
    notification = await service.update_notification(
        bedas_id,
        NotificationUpdate(customer_name="Yeni Müşteri", parcel_block="101", parcel_no="7"),
    )
    assert notification.customer_name == "Yeni Müşteri"
    assert notification.parcel_block == "101"
    assert notification.company == EdasCompany.BEDAS.value

    await service.create_notification(NotificationCreate(**ayedas_payload))
    with pytest.raises(ConflictError):
        await service.update_notification(bedas_id, NotificationUpdate(ref_no="AY-2001"))


@pytest.mark.asyncio
async def test_list_filters(service, bedas_id, ayedas_payload):
    await service.create_notification(NotificationCreate(**ayedas_payload))
    await service.update_step_status(bedas_id, "PROJE", "REJECTED")

    items, total, pages = await service.list_notifications(company=EdasCompany.AYEDAS)
    assert total == 1
    assert pages == 1
    assert items[0].ref_no == "AY-2001"

    items, total, _ = await service.list_notifications(status=EdasStatus.REJECTED)
    assert [n.ref_no for n in items] == ["BD-1001"]

    items, total, pages = await service.list_notifications(page=2, page_size=1)
    assert total == 2
    assert pages == 2
    assert len(items) == 1


@pytest.mark.asyncio
async def test_delete_removes_steps_documents_and_files(service, bedas_id, db_session, storage):
    documents = EdasDocumentService(db_session, storage)
    document = await documents.attach(
        bedas_id, "PROJE", "tapu.pdf", "application/pdf", b"%PDF-1.4 tapu"
    )
    assert storage.exists(document.path)

    await service.delete_notification(bedas_id)

    assert await service.get_notification(bedas_id) is None
    assert not storage.exists(document.path)
    with pytest.raises(NotFoundError):
        await documents.get_document(bedas_id, "PROJE", document.id)


@pytest.mark.asyncio
async def test_attach_sees_step_created_by_concurrent_writer(bedas_id, db_session, storage, monkeypatch):
    """A step inserted after the upload was validated is reused, not duplicated."""
    documents = EdasDocumentService(db_session, storage)
    original_get = EdasNotificationService.get_notification
    locked_reads = []

    async def get_notification(self, notification_id, for_update=False):
        if for_update and not locked_reads:
            db_session.add(
                EdasStep(
                    notification_id=notification_id,
                    step_type="BAGLANTI_GORUSU",
                    status=EdasStatus.APPROVED.value,
                    documents=[],
                )
            )
            await db_session.flush()
        if for_update:
            locked_reads.append(notification_id)
        return await original_get(self, notification_id, for_update=for_update)

    monkeypatch.setattr(EdasNotificationService, "get_notification", get_notification)

    document = await documents.attach(
        bedas_id, "BAGLANTI_GORUSU", "kroki.png", "image/png", b"\x89PNG\r\n"
    )

    assert locked_reads == [bedas_id]
    notification = await EdasNotificationService(db_session, storage).get_notification(bedas_id)
    steps = [s for s in notification.steps if s.step_type == "BAGLANTI_GORUSU"]
    assert len(steps) == 1
    assert steps[0].status == EdasStatus.APPROVED.value
    assert [d.id for d in steps[0].documents] == [document.id]
