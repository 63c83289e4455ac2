import httpx
import pytest

from app.core.settings import settings
from app.dependencies import FaultInjector, get_fault_injector
from app.lib.contact_client import ContactApiClient, SubmissionError
from app.lib.contact_form import ContactForm, SubmissionState
from app.lib.contact_schema import ContactSubmission
from app.main import app


@pytest.fixture(autouse=True)
def fast_and_reliable(monkeypatch):
    monkeypatch.setattr(settings, "contact_processing_delay_seconds", 0.0)
    app.dependency_overrides[get_fault_injector] = lambda: FaultInjector(0.0)
    yield
    app.dependency_overrides.clear()


def asgi_http() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app))


@pytest.mark.asyncio
async def test_valid_submission_round_trip():
    async with asgi_http() as http:
        form = ContactForm(ContactApiClient(base_url="http://testserver", client=http), reset_delay=60)
        form.set_field("name", "Jane Doe")
        form.set_field("email", "jane@example.com")
        form.set_field("message", "This is a valid ten-plus char message.")

        assert await form.submit() is True
        assert form.state is SubmissionState.SUCCEEDED
        assert "timestamp" in form.acknowledgement
        form.close()


@pytest.mark.asyncio
async def test_invalid_submission_never_reaches_the_network():
    def handler(request):
        raise AssertionError(f"unexpected request to {request.url}")

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with ContactApiClient(base_url="http://testserver", client=http) as api:
        form = ContactForm(api)
        form.set_field("name", "J")
        form.set_field("email", "jane@example.com")
        form.set_field("message", "short")

        assert await form.submit() is False
        assert form.state is SubmissionState.IDLE
        assert "Name must be at least 2 characters" in form.errors["name"]
        assert "Message must be at least 10 characters" in form.errors["message"]
    await http.aclose()


@pytest.mark.asyncio
async def test_server_rejection_surfaces_as_submission_error():
    bad = ContactSubmission(name="Jane123", email="not-an-email", message="Valid length message here.")
    async with asgi_http() as http:
        api = ContactApiClient(base_url="http://testserver", client=http)
        with pytest.raises(SubmissionError) as excinfo:
            await api.send(bad)
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Failed to send message"


@pytest.mark.asyncio
async def test_server_fault_puts_form_in_failed_state():
    app.dependency_overrides[get_fault_injector] = lambda: FaultInjector(1.0)
    async with asgi_http() as http:
        form = ContactForm(ContactApiClient(base_url="http://testserver", client=http), reset_delay=60)
        form.set_field("name", "Jane Doe")
        form.set_field("email", "jane@example.com")
        form.set_field("message", "This is a valid ten-plus char message.")

        assert await form.submit() is True
        assert form.state is SubmissionState.FAILED
        assert form.error_message == "Failed to send message"
        form.close()


@pytest.mark.asyncio
async def test_network_failure_is_reported():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    api = ContactApiClient(base_url="http://testserver/", client=http)
    submission = ContactSubmission(name="Jane Doe", email="jane@example.com", message="A perfectly fine message.")

    with pytest.raises(SubmissionError) as excinfo:
        await api.send(submission)
    assert excinfo.value.status_code is None
    assert "try again" in excinfo.value.message
    await http.aclose()


@pytest.mark.asyncio
async def test_posts_json_to_contact_path():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"message": "ok", "timestamp": "2026-01-01T00:00:00.000Z"})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    api = ContactApiClient(base_url="http://example.test/", client=http)
    ack = await api.send(ContactSubmission(name="Jane Doe", email="jane@example.com", message="A perfectly fine message."))

    assert seen["url"] == "http://example.test/api/contact"
    assert b'"email":"jane@example.com"' in seen["body"].replace(b" ", b"")
    assert ack["message"] == "ok"
    await http.aclose()
