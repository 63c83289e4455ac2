import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.settings import settings
from app.dependencies import FaultInjector, get_fault_injector
from app.lib.contact_schema import FieldError, ValidationResult, describe_contract, validate

log = logging.getLogger("uvicorn.error")
router = APIRouter(prefix="/api", tags=["contact"])


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _validation_failed(result: ValidationResult) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": result.details()},
    )


@router.post("/contact")
async def contact(request: Request, faults: FaultInjector = Depends(get_fault_injector)):
    try:
        try:
            body = await request.json()
        except ValueError:
            log.warning("[contact] rejected submission: body is not valid JSON")
            return _validation_failed(
                ValidationResult(errors=(FieldError(field="body", message="Invalid JSON body"),))
            )

        result = validate(body)
        if not result.ok:
            log.warning(f"[contact] rejected submission: {result.errors_by_field()}")
            return _validation_failed(result)

        # stands in for persistence / notification
        await asyncio.sleep(settings.contact_processing_delay_seconds)

        submission = result.submission
        log.info(
            f"[contact] submission name={submission.name!r} email={submission.email!r} "
            f"chars={len(submission.message)} timestamp={_utc_timestamp()} "
            f"ip={request.client.host if request.client else 'unknown'} "
            f"user_agent={request.headers.get('user-agent', 'unknown')!r}"
        )

        faults.maybe_fail()

        return JSONResponse(
            status_code=200,
            content={"message": "Message sent successfully", "timestamp": _utc_timestamp()},
        )
    except Exception:
        log.exception("[contact] failed to process submission")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": "Please try again later"},
        )


@router.get("/contact/schema")
async def contact_schema():
    return describe_contract()
