"""Pydantic schemas for request validation and caller-facing snapshots."""

from .common import *  # noqa: F403
from .event import *  # noqa: F403
from .hold import *  # noqa: F403
