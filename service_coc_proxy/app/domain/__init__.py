"""
Domain helpers for the proxy: tag normalization, resource policies and
the result envelope shared by the client, cache and route layers.
"""

from .envelope import Failure, Origin, ResultEnvelope, Success
from .resources import RESOURCES, ResourcePolicy
from .tags import normalize_tag

__all__ = [
    "Failure",
    "Origin",
    "ResultEnvelope",
    "Success",
    "RESOURCES",
    "ResourcePolicy",
    "normalize_tag",
]
