import json
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from tone_formatter.client.api import ToneFormatterClient
from tone_formatter.client.cli import handle_line
from tone_formatter.client.controller import (
    CLEAR_PROMPT,
    RESTORE_PROMPT,
    UNLOAD_WARNING,
    ToneFormatterController,
)
from tone_formatter.client.drafts import InMemoryDraftStorage, JsonFileDraftStorage
from tone_formatter.client.state import DRAFT_KEY, ERROR_MESSAGES, ControllerState, CounterTier
from tone_formatter.exceptions import ErrorCategory


class RecordingPresenter:
    def __init__(self, answers: list[bool] | None = None) -> None:
        self.answers = list(answers or [])
        self.prompts: list[str] = []
        self.events: list[tuple] = []
        self.text = ""
        self.usage: str | None = None
        self.error: tuple[str, bool] | None = None
        self.controls_enabled: bool | None = None
        self.tier: CounterTier | None = None

    def show_text(self, text: str) -> None:
        self.text = text

    def show_char_count(self, length: int, tier: CounterTier) -> None:
        self.tier = tier

    def set_controls_enabled(self, enabled: bool) -> None:
        self.controls_enabled = enabled

    def show_loading(self, loading: bool) -> None:
        self.events.append(("loading", loading))

    def show_success(self, tone: str) -> None:
        self.events.append(("success", tone))

    def show_error(self, message: str, retryable: bool) -> None:
        self.error = (message, retryable)

    def hide_error(self) -> None:
        self.error = None

    def show_usage(self, display: str) -> None:
        self.usage = display

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answers.pop(0)


class FakeService:
    """Scripted stand-in for the HTTP service."""

    def __init__(self) -> None:
        self.format_requests: list[dict] = []
        self.format_responses: list[httpx.Response | Exception] = []
        self.total_usage = 1_500
        self.usage_fails = False
        self.on_format = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/usage":
            if self.usage_fails:
                return httpx.Response(500, json={"error": "Internal server error. Please try again later."})
            return httpx.Response(200, json={"totalUsage": self.total_usage, "message": "🚀 Growing usage!"})

        self.format_requests.append(json.loads(request.content.decode()))
        if self.on_format is not None:
            self.on_format()
        outcome = self.format_responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest_asyncio.fixture
async def http_client(service: FakeService):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(service), base_url="http://formatter.test"
    ) as client:
        yield client


def make_controller(http_client, drafts=None, presenter=None):
    presenter = presenter or RecordingPresenter()
    drafts = drafts if drafts is not None else InMemoryDraftStorage()
    controller = ToneFormatterController(ToneFormatterClient(http_client), drafts, presenter)
    return controller, drafts, presenter


@pytest.mark.asyncio
async def test_format_success(http_client, service: FakeService) -> None:
    service.format_responses.append(httpx.Response(200, json={"formattedText": "Good afternoon."}))
    controller, drafts, presenter = make_controller(http_client)
    controller.set_text("  hey  ")

    assert await controller.format("formal") is True

    assert service.format_requests == [{"text": "hey", "tone": "formal"}]
    assert controller.state is ControllerState.IDLE
    assert controller.text == presenter.text == "Good afternoon."
    assert drafts.load() == "Good afternoon."
    assert ("success", "formal") in presenter.events
    assert presenter.usage == "1.5k"
    assert presenter.controls_enabled is True


@pytest.mark.asyncio
async def test_controls_disabled_and_unload_guarded_while_submitting(
    http_client, service: FakeService
) -> None:
    controller, _, presenter = make_controller(http_client)
    seen: list[tuple] = []

    def during_request() -> None:
        seen.append((controller.state, controller.unload_warning(), presenter.controls_enabled))

    service.on_format = during_request
    service.format_responses.append(httpx.Response(200, json={"formattedText": "done"}))
    controller.set_text("hello")

    await controller.format("casual")

    assert seen == [(ControllerState.SUBMITTING, UNLOAD_WARNING, False)]
    assert controller.unload_warning() is None


@pytest.mark.asyncio
async def test_failure_then_retry_replays_last_request(http_client, service: FakeService) -> None:
    service.format_responses.extend(
        [
            httpx.Response(
                500,
                json={"error": "External API error. Please try again later."},
                headers={"X-Error-Category": "upstream"},
            ),
            httpx.Response(200, json={"formattedText": "Sup."}),
        ]
    )
    controller, _, presenter = make_controller(http_client)
    controller.set_text("Greetings, colleague.")

    assert await controller.format("casual") is False
    assert controller.state is ControllerState.ERROR
    assert presenter.error == (ERROR_MESSAGES[ErrorCategory.UPSTREAM], True)

    controller.set_text("something else entirely")
    assert await controller.retry() is True

    assert service.format_requests == [
        {"text": "Greetings, colleague.", "tone": "casual"},
        {"text": "Greetings, colleague.", "tone": "casual"},
    ]
    assert presenter.error is None
    assert controller.text == "Sup."
    assert controller.state is ControllerState.IDLE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("outcome", "message"),
    [
        (httpx.ConnectError("refused"), ERROR_MESSAGES[ErrorCategory.NETWORK]),
        (httpx.ReadTimeout("slow"), ERROR_MESSAGES[ErrorCategory.TIMEOUT]),
        (
            httpx.Response(500, json={"error": "API configuration error. Please check server setup."},
                           headers={"X-Error-Category": "configuration"}),
            ERROR_MESSAGES[ErrorCategory.CONFIGURATION],
        ),
        (
            httpx.Response(500, json={"error": "External API error. Please try again later."},
                           headers={"X-Error-Category": "rate_limit"}),
            ERROR_MESSAGES[ErrorCategory.RATE_LIMIT],
        ),
        (
            httpx.Response(400, json={"error": 'Tone must be either "formal" or "casual"'},
                           headers={"X-Error-Category": "validation"}),
            'Tone must be either "formal" or "casual"',
        ),
        (httpx.Response(502, text="bad gateway"), "Server error: 502"),
        (httpx.Response(200, json={"unexpected": True}), ERROR_MESSAGES[ErrorCategory.UPSTREAM]),
    ],
)
async def test_failure_messages(http_client, service: FakeService, outcome, message: str) -> None:
    service.format_responses.append(outcome)
    controller, _, presenter = make_controller(http_client)
    controller.set_text("hello")

    await controller.format("formal")

    assert controller.state is ControllerState.ERROR
    assert presenter.error == (message, True)


@pytest.mark.asyncio
async def test_dismiss_error(http_client, service: FakeService) -> None:
    service.format_responses.append(httpx.ConnectError("refused"))
    controller, _, presenter = make_controller(http_client)
    controller.set_text("hello")
    await controller.format("formal")

    controller.dismiss_error()

    assert controller.state is ControllerState.IDLE
    assert presenter.error is None
    assert controller.text == "hello"


@pytest.mark.asyncio
async def test_empty_text_is_rejected_locally(http_client, service: FakeService) -> None:
    controller, _, presenter = make_controller(http_client)
    controller.set_text("   ")

    assert await controller.format("formal") is False

    assert service.format_requests == []
    assert controller.state is ControllerState.IDLE
    assert presenter.error == ("Please enter some text to format.", False)
    assert presenter.controls_enabled is False


@pytest.mark.asyncio
async def test_char_counter_tier_follows_text(http_client) -> None:
    controller, _, presenter = make_controller(http_client)

    controller.set_text("a" * 8_000)
    assert presenter.tier is CounterTier.MEDIUM

    controller.set_text("a" * 10_001)
    assert presenter.tier is CounterTier.HIGH
    assert presenter.controls_enabled is False


@pytest.mark.asyncio
async def test_refresh_usage_failure_shows_placeholder(http_client, service: FakeService) -> None:
    service.usage_fails = True
    controller, _, presenter = make_controller(http_client)

    await controller.refresh_usage()

    assert presenter.usage == "?"


@pytest.mark.asyncio
async def test_clear_requires_confirmation(http_client) -> None:
    presenter = RecordingPresenter(answers=[False, True])
    controller, drafts, _ = make_controller(http_client, presenter=presenter)
    controller.set_text("keep me")

    assert controller.clear() is False
    assert controller.text == "keep me"
    assert drafts.load() == "keep me"

    assert controller.clear() is True
    assert controller.text == ""
    assert drafts.load() is None
    assert presenter.prompts == [CLEAR_PROMPT, CLEAR_PROMPT]


@pytest.mark.asyncio
async def test_clear_empty_text_skips_confirmation(http_client) -> None:
    presenter = RecordingPresenter()
    controller, _, _ = make_controller(http_client, presenter=presenter)

    assert controller.clear() is True
    assert presenter.prompts == []


@pytest.mark.asyncio
async def test_restore_substantial_draft_when_confirmed(http_client) -> None:
    draft = "Dear team,\n" + "please find the quarterly numbers attached. " * 3
    presenter = RecordingPresenter(answers=[True])
    controller, _, _ = make_controller(
        http_client, drafts=InMemoryDraftStorage(draft), presenter=presenter
    )

    assert controller.restore_draft() is True

    assert controller.text == draft
    assert presenter.text == draft
    assert presenter.prompts == [RESTORE_PROMPT]


@pytest.mark.asyncio
async def test_declining_restore_clears_input_and_draft(http_client) -> None:
    drafts = InMemoryDraftStorage("x" * 80)
    presenter = RecordingPresenter(answers=[False])
    controller, _, _ = make_controller(http_client, drafts=drafts, presenter=presenter)

    assert controller.restore_draft() is False

    assert controller.text == ""
    assert presenter.text == ""
    assert drafts.load() is None


@pytest.mark.asyncio
async def test_short_draft_restored_without_prompt(http_client) -> None:
    presenter = RecordingPresenter()
    controller, _, _ = make_controller(
        http_client, drafts=InMemoryDraftStorage("quick note"), presenter=presenter
    )

    assert controller.restore_draft() is True
    assert controller.text == "quick note"
    assert presenter.prompts == []


@pytest.mark.asyncio
async def test_no_draft_to_restore(http_client) -> None:
    controller, _, _ = make_controller(http_client, drafts=InMemoryDraftStorage("   "))

    assert controller.restore_draft() is False
    assert controller.text == ""


def test_json_file_draft_storage(tmp_path: Path) -> None:
    path = tmp_path / "drafts" / "draft.json"
    storage = JsonFileDraftStorage(path)

    assert storage.load() is None
    storage.save("héllo\nworld")
    assert storage.load() == "héllo\nworld"
    assert json.loads(path.read_text(encoding="utf-8")) == {DRAFT_KEY: "héllo\nworld"}

    storage.clear()
    assert storage.load() is None


def test_json_file_draft_storage_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "draft.json"
    path.write_text("{broken", encoding="utf-8")
    storage = JsonFileDraftStorage(path)

    assert storage.load() is None
    storage.save("fresh")
    assert storage.load() == "fresh"


@pytest.mark.asyncio
async def test_cli_lines_build_text_and_commands(http_client, service: FakeService) -> None:
    service.format_responses.append(httpx.Response(200, json={"formattedText": "Hello there."}))
    controller, _, _ = make_controller(http_client)

    assert await handle_line(controller, "hi") is True
    assert await handle_line(controller, "how r u") is True
    assert controller.text == "hi\nhow r u"

    assert await handle_line(controller, ":formal") is True
    assert service.format_requests == [{"text": "hi\nhow r u", "tone": "formal"}]
    assert controller.text == "Hello there."

    assert await handle_line(controller, ":retry") is True
    assert await handle_line(controller, ":quit") is False


@pytest.mark.asyncio
async def test_unpaired_surrogate_text_is_counted_and_sent(http_client, service: FakeService) -> None:
    service.format_responses.append(httpx.Response(200, json={"formattedText": "Hi there."}))
    controller, drafts, presenter = make_controller(http_client)

    controller.set_text("hi \ud83d there")

    assert presenter.tier is CounterTier.LOW
    assert presenter.controls_enabled is True
    assert drafts.load() == "hi \ud83d there"
    assert await controller.format("formal") is True
    assert service.format_requests == [{"text": "hi \ud83d there", "tone": "formal"}]


def test_json_file_draft_storage_keeps_unpaired_surrogate(tmp_path: Path) -> None:
    storage = JsonFileDraftStorage(tmp_path / "draft.json")

    storage.save("cut \ud83d emoji")

    assert storage.load() == "cut \ud83d emoji"
