"""Manager modules for StepPet integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and own locking, adapter calls and persistence.
"""

from .pet_manager import PetManager, RefreshResult

__all__ = [
    "PetManager",
    "RefreshResult",
]
