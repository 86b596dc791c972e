from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_mock import MockerFixture

from wizard.services import composer
from wizard.services.composer import CompositionError, compose
from wizard.settings import settings


WEBINAR = {
    "title": "Python for data analysis",
    "description": "Hands-on session",
    "presenter": "Luis Rodriguez",
    "date": "01/06/2025 10:00:00",
    "duration": 60,
}


def completion(content: str) -> Any:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def client(mocker: MockerFixture) -> Any:
    mocker.patch.object(settings, "openai_api_key", "sk-test")
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    client.close = AsyncMock()
    mocker.patch("wizard.services.composer.get_client", return_value=client)
    return client


@pytest.mark.parametrize("kind", list(composer.FALLBACK_TITLES))
async def test__compose__fallback_without_api_key(mocker: MockerFixture, kind: str) -> None:
    mocker.patch.object(settings, "openai_api_key", None)
    get_client = mocker.patch("wizard.services.composer.get_client")

    mail = await compose(kind, WEBINAR)

    get_client.assert_not_called()
    assert WEBINAR["title"] in mail.title
    assert mail.message.startswith("<div>")


async def test__compose(client: Any) -> None:
    client.chat.completions.create.return_value = completion('{"title": "Recordatorio", "message": "<div>Hola</div>"}')

    mail = await compose("reminder", WEBINAR, {"name": "Ana"})

    assert mail.title == "Recordatorio"
    assert mail.message == "<div>Hola</div>"
    client.close.assert_awaited_once()
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == settings.openai_model
    assert kwargs["response_format"] == {"type": "json_object"}
    system, user = kwargs["messages"]
    assert settings.app_name in system["content"]
    assert "reminder" in user["content"]
    assert "Ana" in user["content"]


@pytest.mark.parametrize("content", ["not json", '{"title": "Missing message"}', ""])
async def test__compose__invalid_completion(client: Any, content: str) -> None:
    client.chat.completions.create.return_value = completion(content)

    with pytest.raises(CompositionError):
        await compose("attendee_left", WEBINAR)


async def test__compose__client_closed_on_error(client: Any) -> None:
    client.chat.completions.create.side_effect = TimeoutError

    with pytest.raises(TimeoutError):
        await compose("webinar_cancelled", WEBINAR)

    client.close.assert_awaited_once()


def test__fallback__escapes_title() -> None:
    mail = composer.fallback("webinar_cancelled", WEBINAR | {"title": "<b>Python</b>"})

    assert mail.title == "<b>Python</b> has been cancelled"
    assert "<b>" not in mail.message
    assert "&lt;b&gt;Python&lt;/b&gt;" in mail.message
