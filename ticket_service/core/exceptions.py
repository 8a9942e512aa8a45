"""Service exceptions carrying RFC 9457 style Problem Details."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..schemas.common import Problem


class ProblemDetailsException(Exception):
    """
    Base exception class following RFC 9457 Problem Details.

    https://tools.ietf.org/rfc/rfc9457.txt

    The status code mirrors the HTTP status a transport layer would use
    for the same failure.
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: Status code classifying the failure
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        # Create the problem details object
        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        # Add extensions
        self.problem_details.update(self.extensions)

        super().__init__(detail or title)

    def to_problem(self) -> Problem:
        """Return the problem details as a Problem schema."""
        return Problem.model_validate(self.problem_details)


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[List[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {}
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://example.com/problems/validation-error",
            instance=instance,
            extensions=extensions,
        )


class InvalidArgumentError(ValidationError):
    """Exception for invalid construction parameters or operation arguments."""

    def __init__(
        self,
        detail: str,
        violations: Optional[List[Dict[str, str]]] = None,
    ):
        super().__init__(detail=detail, violations=violations)
        self.problem_details.update({
            "code": "INVALID_ARGUMENT",
            "retryable": False
        })

    @classmethod
    def from_pydantic(
        cls,
        exc: PydanticValidationError,
        messages: Optional[Dict[str, str]] = None,
    ) -> "InvalidArgumentError":
        """
        Build an InvalidArgumentError from a pydantic validation failure.

        Args:
            exc: The pydantic validation error
            messages: Optional mapping of field path, or "path:error_type",
                to detail message; unmapped failures use pydantic's message

        Returns:
            The converted error
        """
        messages = messages or {}
        violations = []
        details = []
        for error in exc.errors():
            path = ".".join(str(part) for part in error["loc"]) or "__root__"
            violations.append({"path": path, "message": error["msg"]})
            details.append(messages.get(
                f"{path}:{error['type']}",
                messages.get(path, f"{path}: {error['msg']}")
            ))

        return cls(detail="; ".join(details), violations=violations)


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://example.com/problems/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class HoldNotFoundError(NotFoundError):
    """Exception when no active hold matches an id and email.

    An expired hold is indistinguishable from one that never existed.
    """

    def __init__(self, hold_id: int, customer_email: str):
        super().__init__(
            resource_type="hold",
            resource_id=str(hold_id),
            detail=f"Hold {hold_id} for {customer_email} is absent or already expired",
        )
        self.problem_details.update({
            "code": "HOLD_NOT_FOUND",
            "retryable": False,
            "customer_email": customer_email
        })


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri="https://example.com/problems/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class InsufficientInventoryError(ProblemDetailsException):
    """Exception when requested seats exceed the available seats."""

    def __init__(
        self,
        requested_seats: int,
        available_seats: int,
        event_name: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = (
                f"Not enough available seats. Tried to hold {requested_seats} "
                f"but there are only {available_seats} seats available"
            )

        extensions: Dict[str, Any] = {
            "code": "INSUFFICIENT_INVENTORY",
            "retryable": False,
            "requested_seats": requested_seats,
            "available_seats": available_seats,
        }
        if event_name:
            extensions["event_name"] = event_name

        super().__init__(
            status_code=409,
            title="Insufficient Inventory",
            detail=detail,
            type_uri="https://example.com/problems/insufficient-inventory",
            instance=instance,
            extensions=extensions,
        )


class HoldIdsExhaustedError(ConflictError):
    """Exception when every recyclable hold id belongs to an active hold."""

    def __init__(self, ceiling: int):
        super().__init__(
            detail=f"All {ceiling} hold ids are in use by active holds",
            conflicting_resource={"hold_id_ceiling": ceiling}
        )
        self.problem_details.update({
            "code": "HOLD_IDS_EXHAUSTED",
            "retryable": True
        })


class AlreadyBoundError(ConflictError):
    """Exception when a ticket service is bound a second time."""

    def __init__(self, bound_event: str, requested_event: str):
        super().__init__(
            detail="The ticket service is already bound to an event",
            conflicting_resource={
                "bound_event": bound_event,
                "requested_event": requested_event
            }
        )
        self.problem_details.update({
            "code": "ALREADY_BOUND",
            "retryable": False
        })


class NotBoundError(ConflictError):
    """Exception when a ticket service is used before it is bound."""

    def __init__(self):
        super().__init__(
            detail="The ticket service is not bound to a ticketed event"
        )
        self.problem_details.update({
            "code": "NOT_BOUND",
            "retryable": False
        })


class EventMismatchError(ConflictError):
    """Exception when the bound event name differs from the served event."""

    def __init__(self, bound_event: str, event_name: str):
        super().__init__(
            detail=f"Ticket service is bound to '{bound_event}', not to the ticketed event '{event_name}'",
            conflicting_resource={
                "bound_event": bound_event,
                "event_name": event_name
            }
        )
        self.problem_details.update({
            "code": "EVENT_MISMATCH",
            "retryable": False
        })


class ServiceUnavailableError(ProblemDetailsException):
    """Exception when a required background component is not running."""

    def __init__(
        self,
        detail: str = "The service is temporarily unavailable",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=503,
            title="Service Unavailable",
            detail=detail,
            type_uri="https://example.com/problems/service-unavailable",
            instance=instance,
        )


class SchedulerNotRunningError(ServiceUnavailableError):
    """Exception when an expiration timer is armed on a stopped scheduler."""

    def __init__(self, scheduler_name: str):
        super().__init__(detail=f"{scheduler_name} scheduler is not running")
        self.problem_details.update({
            "code": "SCHEDULER_NOT_RUNNING",
            "retryable": False,
            "scheduler": scheduler_name
        })


class InternalServerError(ProblemDetailsException):
    """Exception for internal errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        extensions = {
            "error_id": error_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri="https://example.com/problems/internal-server-error",
            instance=instance,
            extensions=extensions,
        )


class InvariantViolationError(InternalServerError):
    """Exception for impossible states such as duplicate active hold ids.

    Signals a programming error; callers should not try to recover.
    """

    def __init__(self, detail: str):
        super().__init__(detail=detail)
        self.problem_details.update({
            "code": "INVARIANT_VIOLATION",
            "retryable": False
        })
