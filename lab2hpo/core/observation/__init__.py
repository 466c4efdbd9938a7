"""
Observation Module

Pydantic models for observations supplied by the upstream extractor.
"""
from .model import Observation, ObservationComponent, ObservationPeriod

__all__ = [
    "Observation",
    "ObservationComponent",
    "ObservationPeriod",
]
