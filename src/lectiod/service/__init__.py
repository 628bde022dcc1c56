"""Service operations exposed to transports."""

from lectiod.service.handler import ServiceHandler

__all__ = [
    "ServiceHandler",
]
