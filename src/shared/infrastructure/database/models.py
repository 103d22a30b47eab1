"""
Model registry. Importing a model module registers its table on Base.metadata.
"""
from __future__ import annotations


def load_models() -> None:
    import src.education.infrastructure.models  # noqa: F401
    import src.identity.infrastructure.persistence.models.user_model  # noqa: F401
    import src.notifications.infrastructure.models  # noqa: F401
