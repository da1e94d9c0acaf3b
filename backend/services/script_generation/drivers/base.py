from abc import ABC, abstractmethod
from typing import Any


class ScriptGenerationDriver(ABC):
    """Abstract base class for script generation drivers."""

    name: str = "base"

    @abstractmethod
    async def generate(self, system_prompt: str, user_prompt: str, settings: dict[str, Any]) -> str:
        """Return the raw model answer (expected to be a JSON document)."""
        pass
