import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from piecework.core.logging_config import configure_logging
from piecework.routes import catalog, entries, reports


def create_app() -> FastAPI:
    app = FastAPI(title="Piecework Payroll API", version="0.1.0")

    configure_logging(level=os.getenv("PIECEWORK_LOG_LEVEL", "INFO").upper())

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog.router, prefix="/api")
    app.include_router(entries.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Piecework Payroll API",
                "docs": "/docs",
                "health": "/api/catalog",
            }
        )

    return app


app = create_app()
