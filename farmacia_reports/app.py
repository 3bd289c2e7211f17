"""FastAPI application exposing the report exports."""
from fastapi import FastAPI
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from farmacia_reports import __version__
from farmacia_reports.api import reports
from farmacia_reports.core.config import settings
from farmacia_reports.core.logging_config import configure_logging


configure_logging()

app = FastAPI(title="Farmacia Reports API", version=__version__)

app.add_middleware(
    ProxyHeadersMiddleware,
    trusted_hosts="*",
)

app.include_router(reports.router, prefix="/reports", tags=["reports"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def main() -> None:
    import uvicorn

    uvicorn.run(
        "farmacia_reports.app:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.REPORTS_DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    main()
