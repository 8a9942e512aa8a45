"""Ticket service initialization and configuration."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .core.config import Settings, settings as default_settings
from .core.observability import get_logger, setup_structured_logging, setup_tracing
from .models.event import TicketedEvent
from .services.ticket_service import TicketService

logger = logging.getLogger(__name__)


def configure_logging(config: Settings = default_settings) -> None:
    """Configure structlog and the standard library logging it sits beside."""
    setup_structured_logging(config)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_ticket_service(
    config: Optional[Settings] = None,
    *,
    name: Optional[str] = None,
    starts_at: Optional[datetime] = None,
    rows: Optional[int] = None,
    columns: Optional[int] = None,
    hold_duration: Optional[timedelta] = None,
    setup_observability: bool = True,
) -> TicketService:
    """
    Create a ticketed event and a ticket service bound to it.

    Values not given fall back to the configured defaults; the event date
    defaults to thirty days from now.

    Returns:
        TicketService: Bound ticket service, ready for holds
    """
    config = config or default_settings

    if setup_observability:
        configure_logging(config)
        setup_tracing("ticket-hold-service", config)

    event = TicketedEvent(
        name=name or config.default_event_name,
        starts_at=starts_at or datetime.now() + timedelta(days=30),
        rows=rows if rows is not None else config.default_event_rows,
        columns=columns if columns is not None else config.default_event_columns,
        hold_duration=hold_duration,
        settings=config,
    )

    service = TicketService(event)
    service.bind(event.name)

    get_logger(__name__).info(
        "ticket service ready",
        event_name=event.name,
        total_seats=event.total_seats,
        environment=config.environment,
    )

    return service
