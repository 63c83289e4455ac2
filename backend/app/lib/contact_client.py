import logging
from typing import Any, Dict, Optional

import httpx

from app.core.settings import settings
from app.lib.contact_schema import ContactSubmission

log = logging.getLogger("uvicorn.error")

CONTACT_PATH = "/api/contact"


class SubmissionError(Exception):
    """The remote call did not produce a success acknowledgement."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ContactApiClient:
    """
    Posts submissions to the contact endpoint.
    No request timeout: once issued, a call runs until it resolves or fails.
    """

    def __init__(self, base_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.contact_api_url).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=None)

    async def __aenter__(self) -> "ContactApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send(self, submission: ContactSubmission) -> Dict[str, Any]:
        try:
            response = await self._client.post(
                f"{self.base_url}{CONTACT_PATH}",
                json=submission.model_dump(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            log.warning(f"[contact-client] request failed: {exc!r}")
            raise SubmissionError("Could not reach the server. Please try again.") from exc

        if not response.is_success:
            log.warning(f"[contact-client] server answered {response.status_code}: {response.text[:200]}")
            raise SubmissionError("Failed to send message", status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            return {}
