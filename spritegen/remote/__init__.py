"""Adapters for network-backed image generators."""

from .flux import FluxClient, RemoteGenerationError

__all__ = ["FluxClient", "RemoteGenerationError"]
