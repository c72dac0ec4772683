"""Migration step modules.

Each module in this package upgrades the mail log schema by one version.
Modules must define:
    VERSION: int - The version the step upgrades to (dense, starting at 1)
    DESCRIPTION: str - Human-readable description
    up(context): Function that applies the step and returns a StepResult

New modules must be appended to MODULES; the registry is built from
this list only.
"""

from . import v0001_utf8mb4_columns

MODULES = (v0001_utf8mb4_columns,)
