from abc import ABC, abstractmethod
from typing import Any, Dict, List
from pydantic import BaseModel, Field


class FunctionCall(BaseModel):
    """One structured call proposed by the language model."""
    name: str = Field(..., description="Operation name")
    args: Dict[str, Any] = Field(default_factory=dict, description="Raw, unvalidated arguments")


class Oracle(ABC):
    """Base interface for language models that map commands to operations."""

    @abstractmethod
    async def complete(self, prompt: str, declarations: List[Dict[str, Any]]) -> FunctionCall:
        """
        Ask the model for exactly one function call.

        Args:
            prompt: User command, possibly with system hints appended
            declarations: Function declarations the model may choose from

        Returns:
            The single function call the model selected

        Raises:
            OracleFailure: The call could not be made or its reply was unreadable
            ContractViolation: The model replied with anything but one function call
        """
        pass


class OracleFactory:
    """Factory to create the configured oracle."""

    @staticmethod
    def get_oracle(provider: str) -> Oracle:
        """Get the oracle implementation for the provider name."""

        if provider == "gemini":
            from .gemini import GeminiOracle
            return GeminiOracle()
        else:
            raise ValueError(f"Unsupported oracle provider: {provider}")
