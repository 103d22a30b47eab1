"""
Shared Domain Layer
Pure domain contracts with no framework dependencies
"""
from src.shared.domain.base_entity import BaseAggregateRoot, BaseEntity
from src.shared.domain.domain_event import DomainEvent, Recipient

__all__ = [
    "BaseEntity",
    "BaseAggregateRoot",
    "DomainEvent",
    "Recipient",
]
