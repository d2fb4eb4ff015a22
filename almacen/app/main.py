from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from almacen.app.api.endpoints.health import router as health_router
from almacen.app.api.errors import register_error_handlers
from almacen.app.api.router import router as api_router
from almacen.app.core.config import settings
from almacen.app.core.logging_config import configure_logging

configure_logging()

app = FastAPI(title="Almacén Antibiogramas", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(health_router, tags=["health"])
app.include_router(api_router, prefix="/api")


def run() -> None:
    import uvicorn

    uvicorn.run("almacen.app.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
