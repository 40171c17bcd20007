"""Abstract base class for all pipeline agents."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseAgent(ABC):
    """
    Abstract base class that all agents must inherit from.

    An agent is one stage of a sequential pipeline. It reads the keys it
    needs from the shared context and returns only the keys it produces.
    """

    def __init__(self, name: str) -> None:
        """
        Initialize the agent.

        Args:
            name: Stage name used in logs and failure messages.
        """
        self.name = name

    @abstractmethod
    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Execute the agent's main logic.

        Args:
            input_data: Accumulated pipeline context.

        Returns:
            Dictionary of new context keys.
        """
        pass

    def require(self, input_data: Dict[str, Any], key: str) -> Any:
        """
        Fetch a context key an upstream stage must have produced.

        Raises:
            ValueError: If the key is missing or None.
        """
        value = input_data.get(key)
        if value is None:
            raise ValueError(f"Pipeline contract violation: '{key}' missing in {self.name} input")
        return value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
