"""Test fakes for maillog."""

from .migrations import FakeSchemaExecutor, InMemoryVersionStore

__all__ = ["FakeSchemaExecutor", "InMemoryVersionStore"]
