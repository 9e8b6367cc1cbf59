"""Engine modules for StepPet integration.

Contains specialized computation engines:
- step_engine: Daily / weekly / lifetime step accounting
- leveling_engine: Leveling ladder lookup and XP cascade
- progression_engine: Hatching, growth stages and milestones
- minigame_engine: Feed, fetch and adventure eligibility
"""

# Use relative imports within package to avoid mypy module resolution issues
from .leveling_engine import LevelingEngine, LevelUpResult
from .minigame_engine import ClaimOutcome, MiniGameEngine
from .progression_engine import (
    InvalidClaimError,
    MilestoneClaimResult,
    ProgressionEngine,
    ProgressionResult,
)
from .step_engine import StepAccountingResult, StepEngine

__all__ = [
    "ClaimOutcome",
    "InvalidClaimError",
    "LevelUpResult",
    "LevelingEngine",
    "MilestoneClaimResult",
    "MiniGameEngine",
    "ProgressionEngine",
    "ProgressionResult",
    "StepAccountingResult",
    "StepEngine",
]
