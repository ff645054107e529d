# External Integrations Module
from src.modules.integrations.backend_client import ApiClientError, EdasApiClient

__all__ = ["ApiClientError", "EdasApiClient"]
