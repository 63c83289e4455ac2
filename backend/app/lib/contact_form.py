import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from app.core.settings import settings
from app.lib.contact_client import SubmissionError
from app.lib.contact_schema import FIELDS, ContactSubmission, validate, validate_field

log = logging.getLogger("uvicorn.error")

UNEXPECTED_ERROR = "An unexpected error occurred. Please try again."


class SubmissionState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Transport(Protocol):
    async def send(self, submission: ContactSubmission) -> Dict[str, Any]: ...


class ContactForm:
    """
    Client-side model of the contact form.

    idle -> submitting          submit() with locally valid values
    submitting -> succeeded     transport acknowledged; field values cleared
    submitting -> failed        transport raised; error_message recorded
    succeeded -> idle           after reset_delay, or compose_another()
    failed -> idle              after reset_delay (a new submit() also leaves it)

    Entering succeeded/failed schedules a single revert timer on the running
    loop; any transition out of those states cancels it.
    """

    def __init__(self, transport: Transport, reset_delay: Optional[float] = None):
        self.transport = transport
        self.reset_delay = settings.contact_reset_delay_seconds if reset_delay is None else reset_delay
        self.values: Dict[str, str] = {name: "" for name in FIELDS}
        self.errors: Dict[str, List[str]] = {}
        self.state = SubmissionState.IDLE
        self.error_message = ""
        self.acknowledgement: Optional[Dict[str, Any]] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def can_submit(self) -> bool:
        return self.state in (SubmissionState.IDLE, SubmissionState.FAILED)

    def set_field(self, name: str, value: str) -> None:
        if name not in self.values:
            raise KeyError(name)
        if self.state is SubmissionState.SUBMITTING:
            return  # inputs are disabled while a request is in flight
        self.values[name] = value

    def blur(self, name: str) -> List[str]:
        messages = validate_field(name, self.values[name])
        if messages:
            self.errors[name] = messages
        else:
            self.errors.pop(name, None)
        return messages

    async def submit(self) -> bool:
        if not self.can_submit:
            log.debug(f"[contact-form] submit ignored in state {self.state.value}")
            return False
        result = validate(self.values)
        if not result.ok:
            self.errors = result.errors_by_field()
            return False

        if self.state is SubmissionState.FAILED:
            self._revert()

        self.errors = {}
        self.state = SubmissionState.SUBMITTING
        try:
            ack = await self.transport.send(result.submission)
        except asyncio.CancelledError:
            self._fail("Submission was cancelled. Please try again.")
            raise
        except SubmissionError as exc:
            self._fail(exc.message)
            return True
        except Exception:
            log.exception("[contact-form] unexpected transport failure")
            self._fail(UNEXPECTED_ERROR)
            return True

        self.acknowledgement = ack
        self.values = {name: "" for name in FIELDS}
        self.state = SubmissionState.SUCCEEDED
        self._schedule_revert()
        return True

    def compose_another(self) -> None:
        if self.state is SubmissionState.SUCCEEDED:
            self._revert()

    def close(self) -> None:
        self._cancel_timer()

    def _fail(self, message: str) -> None:
        log.warning(f"[contact-form] submission failed: {message}")
        self.error_message = message
        self.state = SubmissionState.FAILED
        self._schedule_revert()

    def _schedule_revert(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().call_later(self.reset_delay, self._revert)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _revert(self) -> None:
        self._cancel_timer()
        self.state = SubmissionState.IDLE
        self.error_message = ""
        self.acknowledgement = None
