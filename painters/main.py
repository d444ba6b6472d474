from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
import logging

from painters.api.routes import router
from painters.singleton import init_session

app = FastAPI(title="perspective-painters", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Serve the browser UI when one is deployed next to the package (no build step).
from pathlib import Path

_app_dir = Path(__file__).resolve().parent

_static_dir = _app_dir / "static"
if _static_dir.exists():
    app.mount("/ui", StaticFiles(directory=str(_static_dir), html=True), name="ui")

    @app.get("/")
    async def _root() -> RedirectResponse:
        return RedirectResponse(url="/ui/")


@app.on_event("startup")
async def _startup() -> None:
    session = init_session()
    logger.info("Session ready in %s mode with %r", session.state.mode.value, session.state.scenario.title)


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "perspective-painters", "version": "0.1.0"}
