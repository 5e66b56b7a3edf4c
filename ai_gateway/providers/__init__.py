"""Concrete adapters for the interfaces in ``ai_gateway.interfaces``."""
