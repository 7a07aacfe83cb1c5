"""TelegramClient: capture flow and analysis screen driven through bot updates."""
import asyncio
import io

import pytest
from PIL import Image
from telegram.constants import ChatAction
from unittest.mock import AsyncMock, MagicMock, patch

from src.analysis.api import AnalysisApiClient
from src.analysis.session import AnalysisSession, AnalysisState
from src.capture.picker import CapturedImage
from src.config import BotConfig
from src.constants import (
    CALLBACK_CAMERA,
    CALLBACK_GALLERY,
    CALLBACK_RETRY,
    MSG_ERROR_HEADER,
    MSG_LOADING,
    MSG_PICK_FIRST,
    MSG_SEND_CAMERA,
    MSG_SEND_GALLERY,
    MSG_WELCOME,
)
from src.contracts import AnalyzeRoomResponse, RoomType
from src.errors import AnalysisRequestError
from src.telegram.client import TelegramClient, capture_keyboard, retry_keyboard

CHAT_ID = "123456789"


def make_config(*, token: str = "test-token", chat_id: str = CHAT_ID) -> BotConfig:
    return BotConfig(
        telegram_bot_token=token,
        allowed_chat_id=chat_id,
        backend_url="http://backend.test",
        request_timeout=5.0,
        log_level="INFO",
    )


def make_callback(data: str, *, chat_id: int = int(CHAT_ID)) -> MagicMock:
    update = MagicMock()
    update.effective_chat.id = chat_id
    update.callback_query.data = data
    update.callback_query.answer = AsyncMock()
    return update


def make_photo(*, chat_id: int = int(CHAT_ID), caption: str | None = None) -> MagicMock:
    """Minimal mock of a photo Update; Telegram lists sizes smallest first."""
    buffer = io.BytesIO()
    Image.new("RGB", (1280, 960), (90, 90, 90)).save(buffer, format="JPEG")

    tg_file = MagicMock()
    tg_file.download_as_bytearray = AsyncMock(return_value=bytearray(buffer.getvalue()))
    small, large = MagicMock(), MagicMock()
    large.file_unique_id = "large-id"
    large.get_file = AsyncMock(return_value=tg_file)

    update = MagicMock()
    update.effective_chat.id = chat_id
    update.message.photo = [small, large]
    update.message.caption = caption
    return update


def make_command(*, chat_id: int = int(CHAT_ID)) -> MagicMock:
    update = MagicMock()
    update.effective_chat.id = chat_id
    return update


def make_api(**kwargs) -> MagicMock:
    api = MagicMock(spec=AnalysisApiClient)
    api.analyze_room = AsyncMock(**kwargs)
    return api


async def settle(client: TelegramClient, chat_id: str = CHAT_ID) -> None:
    """Let a button-started pick reach the point where it waits for a photo."""
    for _ in range(20):
        if chat_id in client._pending:
            return
        await asyncio.sleep(0)


async def drain(client: TelegramClient) -> None:
    await asyncio.gather(*list(client._background))


@pytest.fixture
def result(response_payload) -> AnalyzeRoomResponse:
    return AnalyzeRoomResponse.model_validate(response_payload)


# ── allowed-chat filter ───────────────────────────────────────────────────────


def test_allowed_chat_id_passes_filter():
    client = TelegramClient(make_config(chat_id="123456789"))
    assert client.is_allowed_chat("123456789")


def test_blocked_chat_id_fails_filter():
    client = TelegramClient(make_config(chat_id="123456789"))
    assert not client.is_allowed_chat("999999999")


def test_allowed_chat_id_ignores_surrounding_whitespace():
    client = TelegramClient(make_config(chat_id=" 123456789 "))
    assert client.is_allowed_chat("123456789")


# ── caption → manual room type ────────────────────────────────────────────────


@pytest.mark.parametrize("caption,expected", [
    ("kitchen", RoomType.KITCHEN),
    ("  Living Room ", RoomType.LIVING_ROOM),
    ("Bathroom", RoomType.BATHROOM),
    ("my messy garage", None),
    ("", None),
    (None, None),
])
def test_parse_room_type(caption, expected):
    assert TelegramClient._parse_room_type(caption) is expected


# ── keyboards ─────────────────────────────────────────────────────────────────


def test_capture_keyboard_offers_camera_and_gallery():
    buttons = [row[0].callback_data for row in capture_keyboard().inline_keyboard]
    assert buttons == [CALLBACK_CAMERA, CALLBACK_GALLERY]


def test_retry_keyboard():
    assert retry_keyboard().inline_keyboard[0][0].callback_data == CALLBACK_RETRY


# ── /start ────────────────────────────────────────────────────────────────────


async def test_start_sends_welcome_with_capture_keyboard():
    client = TelegramClient(make_config(), api=make_api())

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        await client._make_start_handler()(make_command(), MagicMock())

    mock_send.assert_awaited_once_with(CHAT_ID, MSG_WELCOME, reply_markup=capture_keyboard())


async def test_start_resets_in_flight_pick():
    client = TelegramClient(make_config(), api=make_api())

    with patch.object(client, "send_message", new_callable=AsyncMock):
        pick = asyncio.create_task(client._make_button_handler()(make_callback(CALLBACK_CAMERA), MagicMock()))
        await settle(client)
        assert client.flow_for(CHAT_ID).is_processing

        await client._make_start_handler()(make_command(), MagicMock())
        await pick

    assert not client.flow_for(CHAT_ID).is_processing
    assert CHAT_ID not in client._pending


# ── capture → analysis ────────────────────────────────────────────────────────


async def test_camera_pick_runs_analysis_and_renders_result(result):
    api = make_api(return_value=result)
    client = TelegramClient(make_config(), api=api)

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        pick = asyncio.create_task(client._make_button_handler()(make_callback(CALLBACK_CAMERA), MagicMock()))
        await settle(client)
        await client._make_photo_handler()(make_photo(caption="Kitchen"), MagicMock())
        await pick
        await drain(client)

    sent = [c.args[1] for c in mock_send.await_args_list]
    assert sent[0] == MSG_SEND_CAMERA
    assert sent[1] == MSG_LOADING
    assert sent[2].startswith("DETECTED ROOM TYPE: kitchen")

    image_base64, room_type = api.analyze_room.await_args.args
    assert image_base64.startswith("/9j/")
    assert room_type is RoomType.KITCHEN
    assert client.session_for(CHAT_ID).state is AnalysisState.RESULT
    assert client.session_for(CHAT_ID).image.reference == "large-id"


async def test_gallery_pick_prompts_for_gallery_photo(result):
    client = TelegramClient(make_config(), api=make_api(return_value=result))

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        pick = asyncio.create_task(client._make_button_handler()(make_callback(CALLBACK_GALLERY), MagicMock()))
        await settle(client)
        await client._make_photo_handler()(make_photo(), MagicMock())
        await pick
        await drain(client)

    assert mock_send.await_args_list[0].args == (CHAT_ID, MSG_SEND_GALLERY)


async def test_failed_analysis_offers_retry_and_retry_recovers(result):
    api = make_api(side_effect=[AnalysisRequestError("Request failed with status 500"), result])
    client = TelegramClient(make_config(), api=api)

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        pick = asyncio.create_task(client._make_button_handler()(make_callback(CALLBACK_CAMERA), MagicMock()))
        await settle(client)
        await client._make_photo_handler()(make_photo(), MagicMock())
        await pick
        await drain(client)

        failure = mock_send.await_args_list[-1]
        assert failure.args[1] == f"{MSG_ERROR_HEADER}\nRequest failed with status 500"
        assert failure.kwargs["reply_markup"] == retry_keyboard()

        await client._make_button_handler()(make_callback(CALLBACK_RETRY), MagicMock())

    assert client.session_for(CHAT_ID).state is AnalysisState.RESULT
    assert api.analyze_room.await_count == 2
    assert mock_send.await_args_list[-1].kwargs["reply_markup"] is None


async def test_retry_without_failed_session_is_ignored():
    api = make_api()
    client = TelegramClient(make_config(), api=api)

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        await client._make_button_handler()(make_callback(CALLBACK_RETRY), MagicMock())

    mock_send.assert_not_awaited()
    api.analyze_room.assert_not_awaited()


# ── cancel / guards ───────────────────────────────────────────────────────────


async def test_cancel_ends_pick_without_analysis():
    api = make_api()
    client = TelegramClient(make_config(), api=api)

    with patch.object(client, "send_message", new_callable=AsyncMock):
        pick = asyncio.create_task(client._make_button_handler()(make_callback(CALLBACK_CAMERA), MagicMock()))
        await settle(client)
        await client._make_cancel_handler()(make_command(), MagicMock())
        await pick

    assert client.session_for(CHAT_ID) is None
    assert not client.flow_for(CHAT_ID).is_processing
    api.analyze_room.assert_not_awaited()


async def test_photo_without_pending_pick_asks_for_button():
    client = TelegramClient(make_config(), api=make_api())

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        await client._make_photo_handler()(make_photo(), MagicMock())

    mock_send.assert_awaited_once_with(CHAT_ID, MSG_PICK_FIRST, reply_markup=capture_keyboard())


async def test_photo_from_blocked_chat_is_ignored():
    client = TelegramClient(make_config(), api=make_api())

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        await client._make_photo_handler()(make_photo(chat_id=999999999), MagicMock())

    mock_send.assert_not_awaited()


async def test_start_from_blocked_chats_keeps_no_state():
    client = TelegramClient(make_config(), api=make_api())

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        handler = client._make_start_handler()
        for i in range(100):
            await handler(make_command(chat_id=900000000 + i), MagicMock())

    assert len(client._flows) == 0
    mock_send.assert_not_awaited()


async def test_button_from_blocked_chat_is_ignored():
    client = TelegramClient(make_config(), api=make_api())
    update = make_callback(CALLBACK_CAMERA, chat_id=999999999)

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        await client._make_button_handler()(update, MagicMock())

    mock_send.assert_not_awaited()
    update.callback_query.answer.assert_not_awaited()
    assert "999999999" not in client._flows


async def test_cancel_from_blocked_chat_leaves_pick_pending():
    client = TelegramClient(make_config(), api=make_api())

    with patch.object(client, "send_message", new_callable=AsyncMock):
        pick = asyncio.create_task(client._make_button_handler()(make_callback(CALLBACK_CAMERA), MagicMock()))
        await settle(client)
        await client._make_cancel_handler()(make_command(chat_id=999999999), MagicMock())
        await asyncio.sleep(0)
        assert client.flow_for(CHAT_ID).is_processing

        await client._make_cancel_handler()(make_command(), MagicMock())
        await pick

    assert not client.flow_for(CHAT_ID).is_processing


async def test_send_message_before_run_returns_false():
    client = TelegramClient(make_config())
    assert await client.send_message(CHAT_ID, "hi") is False


# ── loading indicator / background tasks ──────────────────────────────────────


async def test_upload_action_repeats_only_while_request_is_pending(result):
    gate = asyncio.Event()

    async def analyze(*args):
        await gate.wait()
        return result

    api = make_api(side_effect=analyze)
    client = TelegramClient(make_config(), api=api)
    client._app = MagicMock()
    client._app.bot.send_chat_action = AsyncMock()
    session = AnalysisSession(api, CapturedImage(reference="r", base64_payload="abc"))

    with patch.object(client, "send_message", new_callable=AsyncMock):
        drive = asyncio.create_task(client._drive(CHAT_ID, session, retry=False))
        for _ in range(5):
            await asyncio.sleep(0)
        client._app.bot.send_chat_action.assert_awaited_with(
            chat_id=int(CHAT_ID), action=ChatAction.UPLOAD_PHOTO
        )

        gate.set()
        await drive

    calls = client._app.bot.send_chat_action.await_count
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert client._app.bot.send_chat_action.await_count == calls
    assert session.state is AnalysisState.RESULT


async def test_unexpected_api_failure_still_offers_retry():
    api = make_api(side_effect=KeyError("boom"))
    client = TelegramClient(make_config(), api=api)
    session = AnalysisSession(api, CapturedImage(reference="r", base64_payload="abc"))

    with patch.object(client, "send_message", new_callable=AsyncMock) as mock_send:
        await client._drive(CHAT_ID, session, retry=False)

    assert session.state is AnalysisState.ERROR
    assert mock_send.await_args_list[-1].kwargs["reply_markup"] == retry_keyboard()


async def test_crashed_background_task_is_logged_and_released(caplog):
    client = TelegramClient(make_config())

    async def crash():
        raise RuntimeError("boom")

    task = asyncio.create_task(crash())
    client._background.add(task)
    task.add_done_callback(client._forget)
    await asyncio.gather(task, return_exceptions=True)
    await asyncio.sleep(0)

    assert task not in client._background
    assert "Analysis task crashed" in caplog.text
