"""
EDAS Module - AYEDAŞ / BEDAŞ notification approval workflow.
"""
from src.modules.edas.models import EdasCompany, EdasDocument, EdasNotification, EdasStatus, EdasStep
from src.modules.edas.router import router

__all__ = [
    "EdasCompany",
    "EdasDocument",
    "EdasNotification",
    "EdasStatus",
    "EdasStep",
    "router",
]
