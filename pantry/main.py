import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import uvicorn

from . import settings
from .exceptions import InsufficientStockError, NotFoundError, PantryError, StorageFault, ValidationError
from .routers import alerts, auth, health, inventory, recipes

logging.basicConfig(level=settings.log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Pantry API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    InsufficientStockError: 400,
    StorageFault: 500,
}


@app.exception_handler(PantryError)
async def pantry_error_handler(_: Request, exc: PantryError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500,
    )
    content = {"detail": str(exc), "error": exc.error_code}
    if isinstance(exc, InsufficientStockError):
        content["shortfall"] = str(exc.shortfall)
        content["unit"] = exc.unit
    if status_code >= 500:
        logger.error("Request failed: %s", exc)
    else:
        logger.info("Request rejected (%s): %s", status_code, exc)
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(_: Request, exc: SQLAlchemyError):
    logger.exception("Unhandled storage error")
    return JSONResponse(
        status_code=500,
        content={"detail": f"Storage failure: {exc}", "error": StorageFault.error_code},
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(inventory.router)
app.include_router(alerts.router)
app.include_router(recipes.router)


@app.get("/")
def root():
    return {"status": "ok"}


def run() -> None:
    uvicorn.run("pantry.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
