"""Transformation service client."""

from gateway.services.transform.client import TransformClient
from gateway.services.transform.singleflight import SingleFlight

__all__ = ["SingleFlight", "TransformClient"]
