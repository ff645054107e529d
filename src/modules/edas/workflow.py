"""
EDAS Module - Step Catalogue & Transition Rules

Her dağıtım şirketinin sabit bir adım sırası vardır. Bir adım onaylanınca
bildirim bir sonraki adıma geçer; son adım onaylanınca bildirim APPROVED,
herhangi bir adım reddedilince REJECTED olur.
"""
from dataclasses import dataclass

from src.modules.edas.models import EdasCompany, EdasStatus

STEP_ORDER: dict[EdasCompany, tuple[str, ...]] = {
    EdasCompany.AYEDAS: (
        "IC_TESISAT_PROJESI",
        "BAGLANTI_GORUSU",
        "BAGLANTI_HATTI_TESISI",
        "BAGLANTI_BEDELI",
        "DAGITIM_BAGLANTI_ANLASMASI",
        "SAYAC_MONTAJ_BEDELI",
        "GECICI_KABUL",
        "TESISAT_MUAYENE",
        "TESISAT",
    ),
    EdasCompany.BEDAS: (
        "PROJE",
        "BAGLANTI_GORUSU",
        "DAGITIM_BAGLANTI_ANLASMASI",
        "TESISIN_TAMAMLANMASI",
        "FEN_MUAYENE",
    ),
}

STEP_NAMES: dict[str, str] = {
    "IC_TESISAT_PROJESI": "İç Tesisat Projesi",
    "BAGLANTI_GORUSU": "Bağlantı Görüşü",
    "BAGLANTI_HATTI_TESISI": "Bağlantı Hattı Tesisi",
    "BAGLANTI_BEDELI": "Bağlantı Bedeli",
    "DAGITIM_BAGLANTI_ANLASMASI": "Dağıtım Bağlantı Anlaşması",
    "SAYAC_MONTAJ_BEDELI": "Sayaç Montaj Bedeli",
    "GECICI_KABUL": "Geçici Kabul",
    "TESISAT_MUAYENE": "Tesisat Muayene",
    "TESISAT": "Tesisat",
    "PROJE": "Proje",
    "TESISIN_TAMAMLANMASI": "Tesisin Tamamlanması",
    "FEN_MUAYENE": "Fen Muayene",
}

_AYEDAS_ACCEPTANCE_DOCUMENTS = (
    "Akım Trafoları Test Raporları",
    "Yapı Kullanma İzin Belgesi veya Yerine Geçen Belge",
    "Elektrik İç Tesisleri Muayene Uygunluk Belgesi",
    "Topraklama Raporu",
    "Yapı Ruhsatı",
    "Diğer",
)

REQUIRED_DOCUMENTS: dict[EdasCompany, dict[str, tuple[str, ...]]] = {
    EdasCompany.AYEDAS: {
        "IC_TESISAT_PROJESI": (
            "Projeci ile Mal Sahibi Arasındaki Sözleşme",
            "Elektrik İç Tesisat Projesi",
            "Diğer",
        ),
        "BAGLANTI_GORUSU": (
            "Enerji Müsaadesi Başvuru Dilekçesi",
            "Yapı Ruhsatı veya Yerine Geçen Belge",
            "Diğer",
        ),
        "BAGLANTI_HATTI_TESISI": ("Bağlantı Hattı Tesisi Projesi", "Diğer"),
        "BAGLANTI_BEDELI": ("Bağlantı bedeli ödeme dekontu", "Diğer"),
        "DAGITIM_BAGLANTI_ANLASMASI": ("Diğer",),
        "SAYAC_MONTAJ_BEDELI": ("Diğer",),
        "GECICI_KABUL": _AYEDAS_ACCEPTANCE_DOCUMENTS,
        "TESISAT_MUAYENE": _AYEDAS_ACCEPTANCE_DOCUMENTS,
        "TESISAT": _AYEDAS_ACCEPTANCE_DOCUMENTS,
    },
    EdasCompany.BEDAS: {
        "PROJE": (
            "Proje Başvuru Dilekçesi",
            "Tapu Senedi",
            "Vekaletname",
            "Daimi Proje (dwg)",
            "Daimi Proje (pdf)",
            "Daimi Proje Kapağı (pdf/jpg)",
            "Yapı Ruhsatı",
            "Beyan ve Yükümlülük Taahhütnamesi",
            "Şirket İmza Sirküsü",
            "Başvuru Sahibi Vergi Levhası",
            "Diğer",
        ),
        "BAGLANTI_GORUSU": ("Enerji Talep Dilekçesi", "Harici Kroki", "Diğer"),
        "DAGITIM_BAGLANTI_ANLASMASI": (
            "Bağlantı Anlaşması Talep Formu",
            "İşe Başlama Tutanağı",
            "Diğer",
        ),
        "TESISIN_TAMAMLANMASI": (
            "AG Tesis Projesi",
            "Kofranın Yapı Dışında Olduğu ve Yerden Yüksekliğini Gösteren Kofra Fotografları",
            "Yetkili Fen Adamı Tarafından Doldurulmuş ve Fen Adamı Tarafından İmzalanmış AG Geçici Kabul Tutanağı",
            "Kablo Kanalı Fotografı",
            "Kablo Montajını Gösteren Fotograf",
            "Kablo Üzerine İnce Kumu Gösteren Fotograf",
            "Kablo Üzerine Tuğla Yerleşimini Gösteren Fotograf",
            "Kablo İkaz Şeridini Gösteren Fotograf",
            "Kablo Kanalı Kapatma Fotografı",
            "Belediyeden Alınan Kazı Ruhsatı",
            "Diğer",
        ),
        "FEN_MUAYENE": (
            "İskan",
            "İş Bitirme Tutanağı",
            "Tesis Yapım Sözleşmesi",
            "Topraklama Ölçüm Raporu",
            "Akım Trafosu Muayene Raporu",
            "Meger Cihazı Kalibrasyon Testi",
            "Topraklama Yetki Belgesi",
            "İç Tesisat Uygunluk Belgesi",
            "Pano Sayaç Fotografları",
            "Diğer",
        ),
    },
}


def step_order(company: EdasCompany | str) -> tuple[str, ...]:
    return STEP_ORDER[EdasCompany(company)]


def first_step(company: EdasCompany | str) -> str:
    return step_order(company)[0]


def is_known_step(company: EdasCompany | str, step_type: str) -> bool:
    return step_type in step_order(company)


def next_step(company: EdasCompany | str, step_type: str) -> str | None:
    """Step after `step_type`, or None when it is the last one."""
    order = step_order(company)
    index = order.index(step_type)
    if index + 1 < len(order):
        return order[index + 1]
    return None


@dataclass(frozen=True)
class Transition:
    """Notification state after a step status write."""
    current_step: str
    status: EdasStatus


def resolve_transition(
    company: EdasCompany | str,
    current_step: str,
    current_status: EdasStatus | str,
    step_type: str,
    new_status: EdasStatus | str,
) -> Transition:
    """
    Decide the notification's pointer and status after `step_type` is set
    to `new_status`.

    A REJECTED notification is halted; its pointer and status never move again.
    """
    current_status = EdasStatus(current_status)
    new_status = EdasStatus(new_status)

    if current_status == EdasStatus.REJECTED:
        return Transition(current_step, current_status)

    if new_status == EdasStatus.REJECTED:
        return Transition(current_step, EdasStatus.REJECTED)

    if new_status == EdasStatus.APPROVED:
        following = next_step(company, step_type)
        if following is None:
            return Transition(step_type, EdasStatus.APPROVED)
        return Transition(following, current_status)

    return Transition(current_step, current_status)
