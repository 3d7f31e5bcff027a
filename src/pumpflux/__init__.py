"""PumpFlux client: template catalog, node configuration and workflow setup."""

__version__ = "0.1.0"
