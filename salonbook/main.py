# salonbook/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import get_settings
from .db import create_db_and_tables
from .routers import (
    appointments_routes,
    auth_routes,
    reviews_routes,
    salons_routes,
    schedule_routes,
    staff_routes,
    users_routes,
)

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("salonbook started")
    yield


app = FastAPI(title="salonbook", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # same envelope the booking errors use, so clients only parse one shape
    errors = jsonable_encoder([{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()])
    message = "; ".join(
        f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg')}" for e in errors
    )
    return JSONResponse(
        status_code=422,
        content={"detail": {"reason": "ValidationError", "message": message, "errors": errors}},
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(salons_routes.router)
app.include_router(staff_routes.router)
app.include_router(schedule_routes.router)
app.include_router(appointments_routes.router)
app.include_router(reviews_routes.router)
