"""
Base Agent - Common interface for the session pipeline stages
"""
from abc import ABC, abstractmethod
from typing import Any, Dict
import logging


class BaseAgent(ABC):
    """
    Abstract base class for pipeline agents.
    Each agent gets its own logger named ``agent.<name>``.
    """

    def __init__(self, name: str, description: str = ""):
        """
        Args:
            name: Agent name, used in log records
            description: What the agent does
        """
        self.name = name
        self.description = description
        self.logger = logging.getLogger(f"agent.{name}")

    @abstractmethod
    async def execute(self, context: Dict[str, Any]) -> Any:
        """
        Run the agent on a context dictionary.

        Args:
            context: Inputs for this agent

        Returns:
            The agent's result
        """

    def log_info(self, message: str):
        self.logger.info(f"[{self.name}] {message}")

    def log_warning(self, message: str):
        self.logger.warning(f"[{self.name}] {message}")

    def log_error(self, message: str):
        self.logger.error(f"[{self.name}] {message}")

    def log_debug(self, message: str):
        self.logger.debug(f"[{self.name}] {message}")

    def __repr__(self):
        return f"<{self.__class__.__name__}(name='{self.name}')>"
