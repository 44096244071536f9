"""
ParticleMorph Core Interfaces.
Defines the abstract contracts for the collaborators around the pipeline.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from particle_morph.core.types import HandState, ParticleField


class IHandTracker(ABC):
    """
    Abstract Protocol for the Hand-Tracking collaborator.
    """

    @abstractmethod
    def detect(self, frame: Any, timestamp_ms: int) -> Optional[Any]:
        """Returns the first hand's 21 landmarks, or None."""

    @abstractmethod
    def close(self) -> None: pass

    @property
    @abstractmethod
    def status(self) -> str:
        """Human readable status for the HUD. Empty string when healthy."""


class IParticleRenderer(ABC):
    """
    Abstract Protocol for the Rendering collaborator.
    """

    @abstractmethod
    def render(self, field: ParticleField, state: HandState, elapsed: float) -> Any: pass
