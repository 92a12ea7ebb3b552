from abc import ABC, abstractmethod
from typing import Any
from crosswalk.domain.models import PedestrianRequestResult
from crosswalk.kernel.signal_controller import SignalController

class Command(ABC):
    @abstractmethod
    def execute(self, controller: SignalController) -> Any:
        pass

class RequestWalkCommand(Command):
    def execute(self, controller: SignalController) -> PedestrianRequestResult:
        accepted = controller.request_walk()
        return PedestrianRequestResult(
            accepted=accepted,
            mode=controller.state.mode,
            view=controller.current_view()
        )

class ShutdownCommand(Command):
    def execute(self, controller: SignalController):
        controller.shutdown()
