"""Recon trigger via GitHub repository_dispatch.

When enabled, announces newly discovered programs to a GitHub repository so
a downstream workflow can start reconnaissance on them. Like notifications,
dispatch is fail-safe: every failure is logged and reported as False.
"""

import asyncio
from typing import Any, Dict, Optional, Sequence

import aiohttp
import structlog

from h1_watcher.models.config import ReconConfig
from h1_watcher.models.program import Program
from h1_watcher.utils.http import client_session

logger = structlog.get_logger()


def build_dispatch_payload(event_type: str, programs: Sequence[Program]) -> Dict[str, Any]:
    """repository_dispatch body listing handle, name and bounty flag per program."""
    return {
        "event_type": event_type,
        "client_payload": {
            "programs": [
                {
                    "handle": p.handle,
                    "name": p.name,
                    "offers_bounties": p.offers_bounties,
                }
                for p in programs
            ]
        },
    }


class ReconDispatcher:
    """Fires a repository_dispatch event for new programs."""

    def __init__(
        self,
        config: Optional[ReconConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config if config is not None else ReconConfig()
        self._session = session

    @property
    def dispatch_url(self) -> str:
        base = self.config.api_base_url.rstrip("/")
        return f"{base}/repos/{self.config.repository}/dispatches"

    async def dispatch(self, programs: Optional[Sequence[Program]]) -> bool:
        """Trigger recon for ``programs``.

        Returns:
            True only when the event was accepted (any 2xx). False when
            disabled, when there is nothing to send, when the token or
            target repository is missing, or on any request failure.
        """
        if not self.config.enabled:
            logger.debug("recon_disabled")
            return False

        if not programs:
            return False

        if not self.config.token or not self.config.repository:
            logger.warning(
                "recon_not_configured",
                has_token=bool(self.config.token),
                has_repository=bool(self.config.repository),
            )
            return False

        payload = build_dispatch_payload(self.config.event_type, programs)
        headers = {
            "Authorization": f"Bearer {self.config.token}",
            "Accept": "application/vnd.github.v3+json",
        }

        try:
            async with client_session(self._session, self.config.timeout_seconds) as session:
                async with session.post(
                    self.dispatch_url, json=payload, headers=headers
                ) as response:
                    if 200 <= response.status < 300:
                        logger.info(
                            "recon_dispatched",
                            repository=self.config.repository,
                            programs=len(programs),
                            status_code=response.status,
                        )
                        return True

                    response_text = await response.text()
                    logger.warning(
                        "recon_dispatch_failed",
                        status_code=response.status,
                        response=response_text[:200],
                    )
                    return False

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("recon_dispatch_error", error=str(e), error_type=type(e).__name__)
            return False
        except Exception as e:
            logger.exception("recon_dispatch_unexpected_error", error=str(e))
            return False
