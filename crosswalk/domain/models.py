from enum import Enum
from typing import Dict, Optional, Tuple
from pydantic import BaseModel
from crosswalk.domain import config

class LightColor(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"

class ControllerMode(str, Enum):
    NORMAL = "NORMAL"
    PENDING = "PENDING"
    WALKING = "WALKING"

class TimerRole(str, Enum):
    ADVANCE = "ADVANCE"
    WALK_END = "WALK_END"
    BLINK = "BLINK"

# color -> (next color, dwell duration in ms)
PHASES: Dict[LightColor, Tuple[LightColor, int]] = {
    LightColor.RED: (LightColor.GREEN, config.RED_TIME_MS),
    LightColor.GREEN: (LightColor.YELLOW, config.GREEN_TIME_MS),
    LightColor.YELLOW: (LightColor.RED, config.YELLOW_TIME_MS),
}

CYCLE_TIME_MS = sum(duration for _, duration in PHASES.values())

def next_color(color: LightColor) -> LightColor:
    return PHASES[color][0]

def dwell_duration(color: LightColor) -> int:
    return PHASES[color][1]

# API/Response Models

class SignalView(BaseModel):
    color: LightColor
    walkActive: bool

class SignalDetails(BaseModel):
    color: LightColor
    mode: ControllerMode
    pedestrianWaiting: bool
    walkLit: bool
    walkActive: bool
    timerRemainingMs: Optional[float] = None
    running: bool

class PedestrianRequestResult(BaseModel):
    accepted: bool
    mode: ControllerMode
    view: SignalView
