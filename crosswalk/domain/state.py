from pydantic import BaseModel
from crosswalk.domain.models import LightColor, ControllerMode

class ControllerState(BaseModel):
    color: LightColor = LightColor.RED
    mode: ControllerMode = ControllerMode.NORMAL
    pedestrian_waiting: bool = False

    # Only meaningful while mode is WALKING
    walk_lit: bool = True
