# -*- coding: utf-8 -*-

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from dotenv import load_dotenv
from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from fruitguard import __version__
from fruitguard.api.endpoints.analysis import router as analysis_router
from fruitguard.config import Settings
from fruitguard.errors import InvalidInput, RelayError
from fruitguard.reporting import render_html_report, render_pdf_report, slugify_filename
from fruitguard.utils.logging import configure_logging

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="FruitGuard", version=__version__)

# Browser clients call the relay directly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.from_env().cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router)


@app.exception_handler(RelayError)
async def relay_error_handler(_request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("Invalid request body for %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/")
async def root():
    return {"message": "FruitGuard API", "version": __version__}


@app.get("/api/health")
async def health():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")}


@app.post("/api/report/export")
async def export_report(result: Dict[str, Any] = Body(...), format: str = "html"):
    """Render a diagnosis as a downloadable HTML or PDF document."""
    if result.get("error"):
        raise InvalidInput("Cannot export an error result")

    format_normalized = (format or "html").lower()
    slug = slugify_filename(result.get("fruitType"))
    timestamp = datetime.now(timezone.utc).astimezone().strftime("%Y%m%d")

    if format_normalized == "html":
        html_content = render_html_report(result)
        filename = f"{slug}-{timestamp}.html"
        return Response(
            content=html_content,
            media_type="text/html; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
        )

    if format_normalized == "pdf":
        pdf_bytes = render_pdf_report(result)
        filename = f"{slug}-{timestamp}.pdf"
        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
        )

    raise InvalidInput("Unsupported format. Use 'html' or 'pdf'.")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
