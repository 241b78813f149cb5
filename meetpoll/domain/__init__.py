"""
Domain layer - Pure business logic without external dependencies.
"""

from .aggregator import AvailabilityAggregator
from .models import AggregatedRange, Form, Interval, Room

__all__ = ["AggregatedRange", "AvailabilityAggregator", "Form", "Interval", "Room"]
