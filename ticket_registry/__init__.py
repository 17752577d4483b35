"""Ownership and lifecycle registry for event tickets."""

from .main import create_registry, registry_lifespan

__all__ = ["create_registry", "registry_lifespan"]
