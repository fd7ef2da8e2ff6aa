from abc import ABC, abstractmethod
from typing import Any, Dict

from .context import StepContext

class BaseStepHandler(ABC):
    """ Abstract base class for step handlers. """

    def __init__(self, context: StepContext):
        self.context = context
        self.step = context.step

    def header(self) -> Dict[str, Any]:
        return {
            "step_number": self.step.step_number,
            "title": self.step.title,
            "description": self.step.description,
        }

    @abstractmethod
    def render(self) -> Dict[str, Any]:
        """
        Presentation payload for the client.
        """
        pass

    @abstractmethod
    def process(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a submission.  Returns ``success`` plus ``errors`` or data.
        """
        pass

    @abstractmethod
    def completion_status(self) -> Dict[str, Any]:
        """
        Whether the step has everything it needs to complete.
        """
        pass
