import html
import re

from telegram import Bot
from telegram.constants import ParseMode

from src.utils.logger import setup_logger

logger = setup_logger(__name__)

MAX_MESSAGE_LENGTH = 4096
SECTION_SEPARATOR = "\n\n"
_TAG_RE = re.compile(r"<[^>]+>")


def escape_html(text: str) -> str:
    """Escape HTML special characters. Only <, >, & need escaping for Telegram HTML."""
    return html.escape(text, quote=False)


def strip_html(text: str) -> str:
    return _TAG_RE.sub("", text)


class TelegramNotifier:
    """Push dashboard messages and alert notifications to a Telegram chat."""

    def __init__(self, bot_token: str, chat_id: str):
        self.bot = Bot(token=bot_token)
        self.chat_id = chat_id

    async def send_message(self, html_text: str) -> bool:
        """Send an HTML message, split on section boundaries when too long.

        Returns True if all parts were delivered.
        """
        parts = split_message(html_text)
        all_ok = True
        for i, part in enumerate(parts):
            if len(parts) > 1:
                logger.info("Sending message part %d/%d (%d chars)", i + 1, len(parts), len(part))
            if not await self._send_single(part):
                all_ok = False
        return all_ok

    async def send_alerts(self, messages: list[str]) -> int:
        """Send one message per triggered alert. Returns how many went through."""
        sent = 0
        for msg in messages:
            if await self._send_single(msg):
                sent += 1
        return sent

    async def send_error(self, message: str) -> bool:
        error_html = f"<b>Dashboard Error</b>\n\n<code>{escape_html(message)}</code>"
        return await self.send_message(error_html)

    async def _send_single(self, html_text: str) -> bool:
        """HTML parse mode first, plain text if Telegram rejects the markup."""
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=html_text,
                parse_mode=ParseMode.HTML,
            )
            return True
        except Exception as e:
            logger.error("HTML send failed: %s. Trying plain text fallback.", e)

        try:
            await self.bot.send_message(chat_id=self.chat_id, text=strip_html(html_text))
            return True
        except Exception as e:
            logger.error("Plain text send also failed: %s", e)
            return False


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a message at section boundaries to stay under Telegram's limit."""
    if len(text) <= limit:
        return [text]

    parts: list[str] = []
    current = ""
    for section in text.split(SECTION_SEPARATOR):
        candidate = current + SECTION_SEPARATOR + section if current else section
        if len(candidate) <= limit:
            current = candidate
            continue
        if current:
            parts.append(current)
        if len(section) > limit:
            # A single oversized section gets cut into fixed-size chunks
            parts.extend(section[i : i + limit] for i in range(0, len(section), limit))
            current = ""
        else:
            current = section

    if current:
        parts.append(current)
    return parts
