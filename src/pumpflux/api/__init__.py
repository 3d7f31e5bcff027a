"""REST client for the PumpFlux API."""

from pumpflux.api.client import PumpfluxClient

__all__ = ["PumpfluxClient"]
