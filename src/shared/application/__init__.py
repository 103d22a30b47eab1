"""
Shared Application Layer
Service base class and event publishing contract
"""
from src.shared.application.service import ApplicationService, EventPublisher

__all__ = ["ApplicationService", "EventPublisher"]
