"""In-process seat hold and reservation service for a single ticketed event."""

from .bootstrap import create_ticket_service
from .models.event import TicketedEvent
from .services.ticket_service import TicketService

__all__ = ["TicketService", "TicketedEvent", "create_ticket_service"]
