"""
Domain models — Pydantic types for dotboot.

All models are re-exported here for convenient access:

    from dotboot.core.models import UnitSpec, PackageSpec, Receipt, RunState
"""

from dotboot.core.models.action import Action, Receipt
from dotboot.core.models.state import LastRun, RunState, UnitMarker
from dotboot.core.models.step import Outcome, StepResult
from dotboot.core.models.unit import (
    BootstrapConfig,
    CommandStepSpec,
    PackageSpec,
    RcBlockSpec,
    ToolVersion,
    UnitSpec,
    VersionManagerSpec,
)

__all__ = [
    "Action",
    "BootstrapConfig",
    "CommandStepSpec",
    "LastRun",
    "Outcome",
    "PackageSpec",
    "RcBlockSpec",
    "Receipt",
    "RunState",
    "StepResult",
    "ToolVersion",
    "UnitMarker",
    "UnitSpec",
    "VersionManagerSpec",
]
