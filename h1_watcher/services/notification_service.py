"""Notification service for new-program alerts.

Provides async delivery to Telegram and Discord with:
- Per-channel markup and length-limited chunking
- Paced sequential sends within a channel
- Fail-safe error handling (never breaks the pipeline)

Usage:
    from h1_watcher.services.notification_service import NotificationService

    service = NotificationService(settings.telegram, settings.discord)
    results = await service.notify(new_programs)
    # {"telegram": True, "discord": False}
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import aiohttp
import structlog

from h1_watcher.models.config import DiscordConfig, TelegramConfig
from h1_watcher.models.notification import NotificationResult
from h1_watcher.models.program import Program
from h1_watcher.services.message_formatter import (
    DISCORD_HEADER_LABEL,
    TELEGRAM_HEADER_LABEL,
    chunk_messages,
    format_discord_entry,
    format_telegram_entry,
)
from h1_watcher.utils.http import client_session

logger = structlog.get_logger()

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"
CHUNK_DELAY_SECONDS = 0.5

SleepFn = Callable[[float], Awaitable[None]]


class NotificationService:
    """Sends new-program notifications to every configured channel.

    Channels run one after another, Telegram first. A channel reports
    success only if every one of its chunks was accepted; a failed chunk
    does not stop the remaining chunks from being attempted.
    """

    CHANNELS = ("telegram", "discord")

    def __init__(
        self,
        telegram: Optional[TelegramConfig] = None,
        discord: Optional[DiscordConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: SleepFn = asyncio.sleep,
        chunk_delay: float = CHUNK_DELAY_SECONDS,
    ) -> None:
        self.telegram = telegram if telegram is not None else TelegramConfig()
        self.discord = discord if discord is not None else DiscordConfig()
        self._session = session
        self._sleep = sleep
        self.chunk_delay = chunk_delay
        self.last_results: List[NotificationResult] = []

    async def notify(self, programs: Optional[Sequence[Program]]) -> Dict[str, bool]:
        """Send the batch to each channel.

        Args:
            programs: Newly discovered programs, in notification order.

        Returns:
            Per-channel success, keyed "telegram" and "discord". Unconfigured
            channels and an empty batch report False without any request.
        """
        self.last_results = []
        results = {channel: False for channel in self.CHANNELS}

        if not programs:
            logger.debug("notification_skipped", reason="no_programs")
            return results

        if self.telegram.configured:
            results["telegram"] = await self._notify_telegram(programs)
        else:
            logger.debug("telegram_not_configured")

        if self.discord.configured:
            results["discord"] = await self._notify_discord(programs)
        else:
            logger.debug("discord_not_configured")

        return results

    async def _notify_telegram(self, programs: Sequence[Program]) -> bool:
        chunks = chunk_messages(
            programs,
            format_telegram_entry,
            TELEGRAM_HEADER_LABEL,
            self.telegram.max_length,
        )
        url = TELEGRAM_API_URL.format(token=self.telegram.bot_token)

        def payload(text: str) -> Dict[str, Any]:
            return {
                "chat_id": self.telegram.chat_id,
                "text": text,
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            }

        return await self._send_chunks(
            "telegram", url, chunks, payload, self.telegram.timeout_seconds
        )

    async def _notify_discord(self, programs: Sequence[Program]) -> bool:
        chunks = chunk_messages(
            programs,
            format_discord_entry,
            DISCORD_HEADER_LABEL,
            self.discord.max_length,
        )

        def payload(text: str) -> Dict[str, Any]:
            return {"content": text, "username": self.discord.username}

        assert self.discord.webhook_url is not None
        return await self._send_chunks(
            "discord",
            self.discord.webhook_url,
            chunks,
            payload,
            self.discord.timeout_seconds,
        )

    async def _send_chunks(
        self,
        provider: str,
        url: str,
        chunks: List[str],
        build_payload: Callable[[str], Dict[str, Any]],
        timeout_seconds: float,
    ) -> bool:
        """Send chunks in order, pausing between them; AND the outcomes."""
        logger.info("sending_notification", provider=provider, chunks=len(chunks))

        all_ok = True
        for index, text in enumerate(chunks):
            if index > 0:
                await self._sleep(self.chunk_delay)

            result = await self._post(
                provider, url, build_payload(text), timeout_seconds, part=index + 1
            )
            self.last_results.append(result)
            all_ok = all_ok and result.success

        if all_ok:
            logger.info("notification_sent", provider=provider, chunks=len(chunks))
        else:
            logger.warning("notification_incomplete", provider=provider, chunks=len(chunks))
        return all_ok

    async def _post(
        self,
        provider: str,
        url: str,
        payload: Dict[str, Any],
        timeout_seconds: float,
        part: int,
    ) -> NotificationResult:
        """POST one message. Every failure becomes a failed result."""
        try:
            async with client_session(self._session, timeout_seconds) as session:
                async with session.post(url, json=payload) as response:
                    response_status = response.status

                    if 200 <= response_status < 300:
                        return NotificationResult(
                            success=True,
                            provider=provider,
                            response_status=response_status,
                            part=part,
                        )

                    response_text = await response.text()
                    logger.warning(
                        "notification_send_failed",
                        provider=provider,
                        part=part,
                        status_code=response_status,
                        response=response_text[:200],
                    )
                    return NotificationResult(
                        success=False,
                        provider=provider,
                        error=f"HTTP {response_status}: {response_text[:100]}",
                        response_status=response_status,
                        part=part,
                    )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                "notification_send_error",
                provider=provider,
                part=part,
                error=str(e),
                error_type=type(e).__name__,
            )
            return NotificationResult(
                success=False,
                provider=provider,
                error=f"HTTP error: {type(e).__name__}: {e}",
                part=part,
            )
        except Exception as e:
            # Catch-all: notifications should never break the pipeline
            logger.exception("notification_unexpected_error", provider=provider, error=str(e))
            return NotificationResult(
                success=False,
                provider=provider,
                error=f"Unexpected error: {e}",
                part=part,
            )
