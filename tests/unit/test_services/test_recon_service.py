"""Unit tests for ReconDispatcher."""

import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from h1_watcher.models.config import ReconConfig
from h1_watcher.models.program import Program
from h1_watcher.services.recon_service import ReconDispatcher, build_dispatch_payload


def make_session(status=204, error=None):
    response = MagicMock()
    response.status = status
    response.text = AsyncMock(return_value="")

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=response)
    ctx.__aexit__ = AsyncMock(return_value=None)

    session = MagicMock()
    session.post = MagicMock(side_effect=error) if error else MagicMock(return_value=ctx)
    return session


@pytest.fixture
def programs():
    return [
        Program(id="1", handle="acme", name="Acme", offers_bounties=True),
        Program(id="2", handle="beta", name="Beta", offers_bounties=False),
    ]


@pytest.fixture
def enabled_config():
    return ReconConfig(enabled="true", token="ghp_token", repository="owner/repo")


def test_build_dispatch_payload(programs):
    assert build_dispatch_payload("new-h1-program", programs) == {
        "event_type": "new-h1-program",
        "client_payload": {
            "programs": [
                {"handle": "acme", "name": "Acme", "offers_bounties": True},
                {"handle": "beta", "name": "Beta", "offers_bounties": False},
            ]
        },
    }


@pytest.mark.asyncio
async def test_dispatch_request(enabled_config, programs):
    session = make_session(204)
    dispatcher = ReconDispatcher(enabled_config, session=session)

    assert await dispatcher.dispatch(programs) is True

    call = session.post.call_args
    assert call.args[0] == "https://api.github.com/repos/owner/repo/dispatches"
    assert call.kwargs["headers"] == {
        "Authorization": "Bearer ghp_token",
        "Accept": "application/vnd.github.v3+json",
    }
    assert call.kwargs["json"]["event_type"] == "new-h1-program"


@pytest.mark.asyncio
async def test_any_2xx_is_success(enabled_config, programs):
    dispatcher = ReconDispatcher(enabled_config, session=make_session(200))
    assert await dispatcher.dispatch(programs) is True


@pytest.mark.asyncio
async def test_disabled_sends_nothing(programs):
    session = make_session()
    dispatcher = ReconDispatcher(ReconConfig(enabled=False, token="t", repository="o/r"), session=session)

    assert await dispatcher.dispatch(programs) is False
    session.post.assert_not_called()


@pytest.mark.asyncio
async def test_empty_batch_sends_nothing(enabled_config):
    session = make_session()
    dispatcher = ReconDispatcher(enabled_config, session=session)

    assert await dispatcher.dispatch([]) is False
    session.post.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "config",
    [
        ReconConfig(enabled=True, token=None, repository="owner/repo"),
        ReconConfig(enabled=True, token="t", repository=None),
    ],
)
async def test_missing_token_or_repository(config, programs):
    session = make_session()
    dispatcher = ReconDispatcher(config, session=session)

    assert await dispatcher.dispatch(programs) is False
    session.post.assert_not_called()


@pytest.mark.asyncio
async def test_http_error_is_false(enabled_config, programs):
    dispatcher = ReconDispatcher(enabled_config, session=make_session(404))
    assert await dispatcher.dispatch(programs) is False


@pytest.mark.asyncio
async def test_network_error_is_false(enabled_config, programs):
    session = make_session(error=aiohttp.ClientConnectionError("refused"))
    dispatcher = ReconDispatcher(enabled_config, session=session)

    assert await dispatcher.dispatch(programs) is False
