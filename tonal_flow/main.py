from __future__ import annotations

import logging
import time

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from tonal_flow.logging_utils import (
    clear_request_context,
    configure_logging,
    current_request_id,
    log_event,
    new_request_id,
    request_elapsed_ms,
    set_request_context,
)
from tonal_flow.models import ModesResponse, ScaleOptions, ScaleScoreResponse
from tonal_flow.services.generator import generate_scale
from tonal_flow.services.musicxml_export import export_musicxml
from tonal_flow.services.scales import available_modes

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Tonal Flow")


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or new_request_id()
    set_request_context(request_id=request_id, route=request.url.path, method=request.method)
    started = time.perf_counter()
    log_event(logger, "request_started")
    try:
        response = await call_next(request)
    except Exception:
        log_event(logger, "request_completed", status_code=500, duration_ms=request_elapsed_ms(started))
        raise

    log_event(logger, "request_completed", status_code=response.status_code, duration_ms=request_elapsed_ms(started))
    response.headers["X-Request-ID"] = request_id
    clear_request_context()
    return response


@app.exception_handler(Exception)
async def global_exception_handler(_request: Request, exc: Exception):
    request_id = current_request_id()
    logger.exception(
        "unhandled_exception",
        extra={"event": "unhandled_exception", "request_id": request_id},
    )
    response = JSONResponse(
        status_code=500,
        content={
            "detail": "Something went wrong while rendering the scale. Please try again.",
            "request_id": request_id,
        },
        headers={"X-Request-ID": request_id},
    )
    clear_request_context()
    return response


def _handle_user_error(action: str, exc: ValueError) -> HTTPException:
    log_event(logger, "request_failed", level=logging.WARNING, action=action, reason=str(exc))
    return HTTPException(
        status_code=422,
        detail={
            "message": f"{action} failed. Please adjust inputs and try again.",
            "request_id": current_request_id(),
        },
    )


@app.get("/api/modes", response_model=ModesResponse)
def modes_endpoint(key: str):
    try:
        options = ScaleOptions(key=key)
    except ValueError as exc:
        raise _handle_user_error("Mode lookup", exc) from exc
    return ModesResponse(key=options.key, modes=available_modes(options.key))


@app.post("/api/scale", response_model=ScaleScoreResponse)
def scale_endpoint(payload: ScaleOptions):
    try:
        generated = generate_scale(payload)
    except ValueError as exc:
        raise _handle_user_error("Scale generation", exc) from exc

    attributes = generated.measures[0].attributes
    return ScaleScoreResponse(
        options=payload,
        time_signature=f"{attributes.time.beats}/{attributes.time.beat_type}",
        key_fifths=attributes.key_fifths,
        measures=generated.measures,
        warnings=generated.warnings,
    )


@app.post("/api/scale/musicxml")
def scale_musicxml_endpoint(payload: ScaleOptions):
    try:
        measures = generate_scale(payload).measures
    except ValueError as exc:
        raise _handle_user_error("MusicXML export", exc) from exc

    log_event(logger, "export_started", format="musicxml")
    content = export_musicxml(measures)
    log_event(logger, "export_completed", format="musicxml", output_size_bytes=len(content.encode("utf-8")))
    return Response(
        content=content,
        media_type="application/vnd.recordare.musicxml+xml",
        headers={"Content-Disposition": "attachment; filename=scale.musicxml"},
    )
