"""Pydantic v2 validation models for superchat output records.

Re-exports all model classes for convenient import::

    from superchat.models import SuperchatRecord, ChatterSummary
"""

from .chatter_summary import ChatterSummary
from .superchat_record import SuperchatRecord

__all__ = [
    "SuperchatRecord",
    "ChatterSummary",
]
