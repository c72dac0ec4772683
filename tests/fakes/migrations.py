"""In-memory collaborator fakes for migration tests.

These implementations satisfy the protocols in maillog.app.protocols
without a database.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from maillog.core.types import EncodingSpec


@dataclass
class InMemoryVersionStore:
    """Option store backed by a dict."""

    values: dict[str, int] = field(default_factory=dict)
    reads: int = 0
    writes: list[tuple[str, int]] = field(default_factory=list)

    def get_int(self, key: str) -> int:
        self.reads += 1
        return self.values.get(key, 0)

    def set_int(self, key: str, value: int, autoload: bool = False) -> None:
        self.values[key] = value
        self.writes.append((key, value))

    def compare_and_set(
        self, key: str, expected: int, value: int, autoload: bool = False
    ) -> bool:
        if self.values.get(key, 0) != expected:
            return False
        self.set_int(key, value, autoload)
        return True


@dataclass
class FakeSchemaExecutor:
    """Schema executor that records calls and returns a canned result."""

    ok: bool = True
    error: str = ""
    calls: list[tuple[str, EncodingSpec]] = field(default_factory=list)

    def alter_columns(self, table_name: str, encoding: EncodingSpec) -> tuple[bool, str]:
        self.calls.append((table_name, encoding))
        if self.ok:
            return True, ""
        return False, self.error
