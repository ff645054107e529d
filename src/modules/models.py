"""
Model registry.
Importing this module registers every mapper on Base.metadata
(create_all, Alembic autogenerate).
"""
from src.modules.auth.models import User  # noqa: F401
from src.modules.edas.models import EdasDocument, EdasNotification, EdasStep  # noqa: F401
