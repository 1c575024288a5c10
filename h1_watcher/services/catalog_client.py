import asyncio
import base64
from typing import Any, Awaitable, Callable, Dict, List, Optional

import aiohttp
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from h1_watcher.models.config import HackerOneConfig
from h1_watcher.models.program import Program
from h1_watcher.utils.exceptions import (
    AuthenticationError,
    ConnectionFailedError,
    MalformedResponseError,
    MissingCredentialsError,
    PaginationLimitError,
    PermanentAPIError,
    RateLimitError,
    RetryableAPIError,
    ServerError,
)
from h1_watcher.utils.http import client_session

logger = structlog.get_logger()

SleepFn = Callable[[float], Awaitable[None]]


def build_auth_header(username: str, token: str) -> str:
    """HTTP Basic authorization value for ``username:token``."""
    encoded = base64.b64encode(f"{username}:{token}".encode("utf-8")).decode("ascii")
    return f"Basic {encoded}"


class HackerOneClient:
    """Fetch public programs from the HackerOne hacker API"""

    PROGRAMS_PATH = "/hackers/programs"

    def __init__(
        self,
        config: HackerOneConfig,
        session: Optional[aiohttp.ClientSession] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.config = config
        self._session = session
        self._sleep = sleep

    @property
    def name(self) -> str:
        """Provider name"""
        return "hackerone"

    def validate_credentials(self) -> Dict[str, str]:
        """Fail fast, naming every missing credential in one error."""
        missing = []
        if not self.config.username:
            missing.append("H1_API_USERNAME")
        if not self.config.token:
            missing.append("H1_API_TOKEN")
        if missing:
            raise MissingCredentialsError(missing)

        assert self.config.username is not None and self.config.token is not None
        return {
            "Accept": "application/json",
            "Authorization": build_auth_header(self.config.username, self.config.token),
        }

    async def fetch_all(self) -> List[Program]:
        """Fetch every page of programs and keep the public ones.

        Follows ``links.next`` until the server omits it, in server order.

        Raises:
            MissingCredentialsError: Before any request, if credentials are unset
            CatalogAPIError: If a page cannot be fetched
        """
        headers = self.validate_credentials()
        url: Optional[str] = f"{self.config.base_url.rstrip('/')}{self.PROGRAMS_PATH}"

        programs: List[Program] = []
        pages = 0

        async with client_session(self._session, self.config.request_timeout_seconds) as session:
            while url:
                if pages >= self.config.max_pages:
                    raise PaginationLimitError(
                        f"Exceeded {self.config.max_pages} pages; server keeps returning links.next"
                    )
                pages += 1

                logger.info("catalog_page_fetch", page=pages)
                body = await self._get_json(session, url, headers)

                page_programs = self._parse_page(body)
                programs.extend(page_programs)

                url = self._next_url(body)

        logger.info("catalog_fetched", pages=pages, public_programs=len(programs))
        return programs

    async def _get_json(
        self, session: aiohttp.ClientSession, url: str, headers: Dict[str, str]
    ) -> Dict[str, Any]:
        """GET one page, retrying transient failures with exponential backoff."""
        retry_config = self.config.retry
        retrying = AsyncRetrying(
            stop=stop_after_attempt(retry_config.max_attempts),
            wait=wait_exponential(multiplier=retry_config.base_delay_seconds, exp_base=2),
            retry=retry_if_exception_type(RetryableAPIError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        async for attempt in retrying:
            with attempt:
                return await self._request_page(session, url, headers)

        raise AssertionError("unreachable: AsyncRetrying re-raises on exhaustion")  # pragma: no cover

    async def _request_page(
        self, session: aiohttp.ClientSession, url: str, headers: Dict[str, str]
    ) -> Dict[str, Any]:
        try:
            async with session.get(url, headers=headers) as response:
                status = response.status

                if status == 429:
                    raise RateLimitError("HackerOne rate limit exceeded", status_code=status)

                if status >= 500:
                    raise ServerError(f"HackerOne server error: HTTP {status}", status_code=status)

                if status in (401, 403):
                    raise AuthenticationError(
                        f"HackerOne rejected credentials: HTTP {status}", status_code=status
                    )

                if not 200 <= status < 300:
                    text = await response.text()
                    logger.error("catalog_api_error", status=status, body=text[:200])
                    raise PermanentAPIError(
                        f"HackerOne API error: HTTP {status}", status_code=status
                    )

                try:
                    body = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise MalformedResponseError(
                        f"HackerOne returned a non-JSON body: {e}", status_code=status
                    ) from e

        except (
            aiohttp.ClientConnectionError,
            aiohttp.ClientPayloadError,
            asyncio.TimeoutError,
        ) as e:
            raise ConnectionFailedError(
                f"Network error contacting HackerOne: {type(e).__name__}: {e}"
            ) from e

        if not isinstance(body, dict):
            raise MalformedResponseError(
                "HackerOne response envelope is not an object", status_code=status
            )
        return body

    def _parse_page(self, body: Dict[str, Any]) -> List[Program]:
        """Normalize a page's items and keep public programs only."""
        items = body.get("data")
        if not isinstance(items, list):
            return []

        programs = []
        for item in items:
            try:
                program = Program.from_api(item)
            except Exception as e:
                logger.warning(
                    "program_parsing_failed",
                    program_id=item.get("id") if isinstance(item, dict) else None,
                    error=str(e),
                )
                continue
            if not program.is_public:
                continue
            if not program.handle:
                logger.warning("program_missing_handle", program_id=program.id)
            programs.append(program)

        return programs

    @staticmethod
    def _next_url(body: Dict[str, Any]) -> Optional[str]:
        links = body.get("links")
        if not isinstance(links, dict):
            return None
        return links.get("next") or None

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else None
        logger.warning(
            "catalog_retry",
            attempt=retry_state.attempt_number,
            error_type=type(error).__name__,
            status=getattr(error, "status_code", None),
            delay_seconds=delay,
        )
