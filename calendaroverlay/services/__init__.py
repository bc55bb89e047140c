"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .overlay_service import CalendarClientProtocol, OverlayService

__all__ = ["CalendarClientProtocol", "OverlayService"]
