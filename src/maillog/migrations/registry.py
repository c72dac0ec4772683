"""Registry mapping schema versions to migration steps."""

from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import TYPE_CHECKING, Callable, Iterable

from ..core.types import StepResult

if TYPE_CHECKING:
    from ..app.protocols import SchemaExecutor


@dataclass(frozen=True)
class StepContext:
    """What a migration step may act on."""

    executor: SchemaExecutor
    table_name: str
    collation: str


@dataclass
class MigrationStep:
    """A migration upgrading the schema to ``version``."""

    version: int
    description: str
    up: Callable[[StepContext], StepResult]

    def __repr__(self) -> str:
        return f"MigrationStep({self.version}, {self.description!r})"


class StepRegistry:
    """Explicit mapping of version number to the step that upgrades to it.

    Example:
        registry = StepRegistry()
        registry.register_module(v0001_utf8mb4_columns)
        registry.missing(0, 2)  # [2]
    """

    def __init__(self, steps: Iterable[MigrationStep] = ()):
        self._steps: dict[int, MigrationStep] = {}
        for step in steps:
            self.register(step)

    def register(self, step: MigrationStep) -> None:
        """Add a step.

        Raises:
            ValueError: If the version is not positive or already registered.
        """
        if step.version < 1:
            raise ValueError(f"Migration version must be positive, got {step.version}")
        if step.version in self._steps:
            raise ValueError(
                f"Duplicate migration for version {step.version}: "
                f"{self._steps[step.version]!r} and {step!r}"
            )
        self._steps[step.version] = step

    def register_module(self, module: ModuleType) -> MigrationStep:
        """Add a step defined by a module with VERSION, DESCRIPTION and up().

        Raises:
            ValueError: If the module lacks VERSION or up.
        """
        if not hasattr(module, "VERSION") or not hasattr(module, "up"):
            raise ValueError(f"Invalid migration module: {module.__name__}")

        step = MigrationStep(
            version=module.VERSION,
            description=getattr(module, "DESCRIPTION", module.__name__),
            up=module.up,
        )
        self.register(step)
        return step

    def get(self, version: int) -> MigrationStep | None:
        return self._steps.get(version)

    def versions(self) -> list[int]:
        """Registered versions in ascending order."""
        return sorted(self._steps)

    def latest(self) -> int:
        """Highest registered version, or 0 if none."""
        return max(self._steps, default=0)

    def missing(self, current: int, target: int) -> list[int]:
        """Versions between ``current`` (exclusive) and ``target`` with no step."""
        return [v for v in range(current + 1, target + 1) if v not in self._steps]

    def __contains__(self, version: object) -> bool:
        return version in self._steps

    def __len__(self) -> int:
        return len(self._steps)


def build_registry() -> StepRegistry:
    """Build the registry of all shipped migration steps."""
    from .versions import MODULES

    registry = StepRegistry()
    for module in MODULES:
        registry.register_module(module)
    return registry
