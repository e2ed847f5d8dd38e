import time
import uuid

from fastapi import Request

from stenella.logging_utils import log_event


async def request_id_middleware(request: Request, call_next):
    # One id per request, echoed back and attached to every log line for it
    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.monotonic()

    response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    log_event(
        "request_finished",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.monotonic() - started) * 1000, 1),
    )
    return response
