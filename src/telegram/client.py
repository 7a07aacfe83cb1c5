"""TelegramClient — mobile host for the capture flow and analysis screen via python-telegram-bot."""
import asyncio
import logging
from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Message, Update
from telegram.constants import ChatAction
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes
from telegram.ext import MessageHandler as TGMessageHandler
from telegram.ext import filters

from src.analysis.api import AnalysisApiClient
from src.analysis.render import render_session
from src.analysis.session import AnalysisSession, AnalysisState
from src.capture.flow import CaptureFlow
from src.capture.picker import (
    CapturedImage,
    ImagePicker,
    ImageSource,
    OnAlert,
    OnNavigate,
    PickedImage,
)
from src.config import BotConfig
from src.constants import (
    BUTTON_CAMERA,
    BUTTON_GALLERY,
    BUTTON_RETRY,
    CALLBACK_CAMERA,
    CALLBACK_GALLERY,
    CALLBACK_RETRY,
    CMD_CANCEL,
    CMD_HELP,
    CMD_START,
    MSG_BLOCKED_CHAT,
    MSG_LOADING,
    MSG_PICK_FIRST,
    MSG_SEND_CAMERA,
    MSG_SEND_GALLERY,
    MSG_WELCOME,
    TELEGRAM_ACTION_INTERVAL,
)
from src.contracts import RoomType

logger = logging.getLogger(__name__)


def capture_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(BUTTON_CAMERA, callback_data=CALLBACK_CAMERA)],
        [InlineKeyboardButton(BUTTON_GALLERY, callback_data=CALLBACK_GALLERY)],
    ])


def retry_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton(BUTTON_RETRY, callback_data=CALLBACK_RETRY)]])


class TelegramImagePicker(ImagePicker):
    """Camera and gallery both live in the Telegram app; a pick waits for the chat's next photo."""

    def __init__(self, host: "TelegramClient", chat_id: str) -> None:
        self._host = host
        self._chat_id = chat_id

    async def request_permission(self, source: ImageSource) -> bool:
        return self._host.is_allowed_chat(self._chat_id)

    async def launch(self, source: ImageSource) -> Optional[PickedImage]:
        return await self._host.wait_for_photo(self._chat_id, source)


class TelegramClient:

    def __init__(self, config: BotConfig, api: Optional[AnalysisApiClient] = None) -> None:
        self._token = config.telegram_bot_token
        self._allowed_chat_id = config.allowed_chat_id
        self._api = api or AnalysisApiClient(config.backend_url, config.request_timeout)
        self._app: Optional[Application] = None
        self._flows: dict[str, CaptureFlow] = {}
        self._pending: dict[str, asyncio.Future] = {}
        self._sessions: dict[str, AnalysisSession] = {}
        self._background: set[asyncio.Task] = set()

    def run(self) -> None:
        # concurrent updates: a pick started from a button waits for a later photo update
        self._app = Application.builder().token(self._token).concurrent_updates(True).build()
        self._app.add_handler(CommandHandler([CMD_START, CMD_HELP], self._make_start_handler()))
        self._app.add_handler(CommandHandler(CMD_CANCEL, self._make_cancel_handler()))
        self._app.add_handler(CallbackQueryHandler(self._make_button_handler()))
        self._app.add_handler(
            TGMessageHandler(filters.PHOTO | filters.Document.IMAGE, self._make_photo_handler())
        )
        self._app.run_polling()

    async def send_message(
        self, to: str, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None
    ) -> bool:
        match self._app:
            case None:
                logger.error("send_message called before run()")
                return False
            case app:
                try:
                    await app.bot.send_message(chat_id=int(to), text=text, reply_markup=reply_markup)
                    return True
                except Exception as exc:
                    logger.error("Telegram send_message failed: %s", exc)
                    return False

    # ── screen state (also used in tests) ────────────────────────────────────

    def is_allowed_chat(self, chat_id: str) -> bool:
        return chat_id.strip() == self._allowed_chat_id.strip()

    def flow_for(self, chat_id: str) -> CaptureFlow:
        match self._flows.get(chat_id):
            case None:
                flow = CaptureFlow(
                    TelegramImagePicker(self, chat_id),
                    on_alert=self._make_alert(chat_id),
                    on_navigate=self._make_navigator(chat_id),
                )
                self._flows[chat_id] = flow
                return flow
            case flow:
                return flow

    def session_for(self, chat_id: str) -> Optional[AnalysisSession]:
        return self._sessions.get(chat_id)

    async def wait_for_photo(self, chat_id: str, source: ImageSource) -> Optional[PickedImage]:
        prompt = MSG_SEND_CAMERA if source is ImageSource.CAMERA else MSG_SEND_GALLERY
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[chat_id] = future
        try:
            await self.send_message(chat_id, prompt)
            return await future
        finally:
            if self._pending.get(chat_id) is future:
                del self._pending[chat_id]

    def deliver_photo(self, chat_id: str, picked: Optional[PickedImage]) -> bool:
        """Resolve the chat's pending pick. None means the user cancelled."""
        match self._pending.get(chat_id):
            case asyncio.Future() as future if not future.done():
                future.set_result(picked)
                return True
            case _:
                return False

    def fail_photo(self, chat_id: str, exc: BaseException) -> None:
        match self._pending.get(chat_id):
            case asyncio.Future() as future if not future.done():
                future.set_exception(exc)
            case _:
                pass

    @staticmethod
    def _parse_room_type(caption: Optional[str]) -> Optional[RoomType]:
        """Caption naming one of the room types → manual override, else None."""
        text = (caption or "").strip().lower()
        return next((t for t in RoomType if t.value == text), None)

    # ── flow collaborators ───────────────────────────────────────────────────

    def _make_alert(self, chat_id: str) -> OnAlert:
        async def _alert(title: str, message: str) -> None:
            await self.send_message(chat_id, f"{title}\n{message}")

        return _alert

    def _make_navigator(self, chat_id: str) -> OnNavigate:
        async def _navigate(image: CapturedImage) -> None:
            session = AnalysisSession(self._api, image)
            self._sessions[chat_id] = session
            task = asyncio.create_task(self._drive(chat_id, session, retry=False))
            self._background.add(task)
            task.add_done_callback(self._forget)

        return _navigate

    def _forget(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Analysis task crashed", exc_info=task.exception())

    async def _drive(self, chat_id: str, session: AnalysisSession, retry: bool) -> None:
        await self.send_message(chat_id, MSG_LOADING)
        run = asyncio.create_task(session.retry() if retry else session.start())
        progress = asyncio.create_task(self._show_progress(chat_id, run))
        try:
            state = await run
        finally:
            progress.cancel()
        markup = retry_keyboard() if state is AnalysisState.ERROR else None
        await self.send_message(chat_id, render_session(session), reply_markup=markup)

    async def _show_progress(self, chat_id: str, run: asyncio.Task) -> None:
        """Keep Telegram's "sending photo" status up until the analysis request settles."""
        match self._app:
            case None:
                return
            case app:
                pass
        while not run.done():
            try:
                await app.bot.send_chat_action(chat_id=int(chat_id), action=ChatAction.UPLOAD_PHOTO)
            except Exception as exc:
                logger.debug("Chat action failed: %s", exc)
            await asyncio.wait({run}, timeout=TELEGRAM_ACTION_INTERVAL)

    async def _retry(self, chat_id: str) -> None:
        match self._sessions.get(chat_id):
            case AnalysisSession() as session if session.state is AnalysisState.ERROR:
                await self._drive(chat_id, session, retry=True)
            case _:
                logger.debug("Retry ignored for chat %s: no failed analysis", chat_id)

    # ── internal handler factory ─────────────────────────────────────────────

    def _allowed_sender(self, update: Update) -> Optional[str]:
        """Chat id of the update as a string, or None when the chat is missing or blocked."""
        match update.effective_chat:
            case None:
                return None
            case chat:
                sender = str(chat.id)
        match self.is_allowed_chat(sender):
            case False:
                logger.warning(MSG_BLOCKED_CHAT, sender)
                return None
            case True:
                return sender

    def _make_start_handler(self):
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            sender = self._allowed_sender(update)
            if sender is None:
                return
            # the screen regained focus: drop whatever flow was left in flight
            self.flow_for(sender).reset()
            await self.send_message(sender, MSG_WELCOME, reply_markup=capture_keyboard())

        return _handler

    def _make_cancel_handler(self):
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            sender = self._allowed_sender(update)
            if sender is None:
                return
            self.deliver_photo(sender, None)

        return _handler

    def _make_button_handler(self):
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            query = update.callback_query
            sender = self._allowed_sender(update)
            if query is None or sender is None:
                return
            await query.answer()
            match query.data:
                case data if data == CALLBACK_CAMERA:
                    await self.flow_for(sender).take_photo()
                case data if data == CALLBACK_GALLERY:
                    await self.flow_for(sender).choose_from_gallery()
                case data if data == CALLBACK_RETRY:
                    await self._retry(sender)
                case data:
                    logger.debug("Unknown callback data: %s", data)

        return _handler

    def _make_photo_handler(self):
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            sender = self._allowed_sender(update)
            if sender is None or update.message is None:
                return

            match sender in self._pending:
                case False:
                    await self.send_message(sender, MSG_PICK_FIRST, reply_markup=capture_keyboard())
                    return
                case True:
                    pass

            try:
                picked = await self._download(update.message)
            except Exception as exc:
                logger.exception("Photo download failed")
                self.fail_photo(sender, exc)
                return
            self.deliver_photo(sender, picked)

        return _handler

    async def _download(self, message: Message) -> PickedImage:
        attachment = message.photo[-1] if message.photo else message.document
        tg_file = await attachment.get_file()
        data = bytes(await tg_file.download_as_bytearray())
        return PickedImage(
            reference=attachment.file_unique_id,
            data=data,
            manual_room_type=self._parse_room_type(message.caption),
        )
