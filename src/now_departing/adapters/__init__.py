"""Adapters for external systems and runtime concerns."""
