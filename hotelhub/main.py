from fastapi import FastAPI

from hotelhub.api.errors import register_exception_handlers
from hotelhub.api.router import router as api_router
from hotelhub.core.telemetry import setup_logging, setup_telemetry

setup_logging()

app = FastAPI(title="Hotel Hub API", version="0.1.0")

register_exception_handlers(app)
setup_telemetry(app)
app.include_router(api_router)
