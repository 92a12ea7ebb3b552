import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from crosswalk.domain import config
from crosswalk.domain.models import SignalView, SignalDetails, PedestrianRequestResult
from crosswalk.kernel.scheduler import AsyncioScheduler
from crosswalk.kernel.signal_controller import SignalController
from crosswalk.kernel.commands import RequestWalkCommand, ShutdownCommand

logger = logging.getLogger(__name__)

controller: Optional[SignalController] = None

def configure_logging(level: str = config.LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the controller runs on this event loop
    global controller
    configure_logging()
    controller = SignalController(AsyncioScheduler())
    controller.start()
    yield
    # Shutdown
    ShutdownCommand().execute(controller)

app = FastAPI(lifespan=lifespan)

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_controller() -> SignalController:
    if controller is None or not controller.running:
        raise HTTPException(status_code=503, detail="Signal controller is not running")
    return controller

@app.get("/api/signal", response_model=SignalView)
async def get_signal_view():
    """Returns the light color and whether the walk indicator is lit"""
    return get_controller().current_view()

@app.get("/api/signal/details", response_model=SignalDetails)
async def get_signal_details():
    """Returns the full controller state"""
    return get_controller().details()

@app.post("/api/signal/pedestrian", response_model=PedestrianRequestResult)
async def press_pedestrian_button():
    """Registers a pedestrian request"""
    result = RequestWalkCommand().execute(get_controller())
    logger.info("Pedestrian request %s", "accepted" if result.accepted else "ignored")
    return result

@app.get("/")
def read_root():
    return {"status": "Crosswalk Signal Controller Running"}
