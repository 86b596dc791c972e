"""Generate notification mails with a chat completion model."""

import json
from html import escape
from typing import Any

import httpx
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from ..logger import get_logger
from ..settings import settings


logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an expert at writing emails. Write the subject and body of an email based on the webinar data you "
    "receive. There are four kinds of emails: registration to the webinar, cancellation of a registration, reminder "
    "30 minutes before the webinar and cancellation of the webinar. You will receive the user data, the kind of email "
    "and the webinar data. The name of the application is \"{app_name}\". Answer in the language '{language}' with a "
    "JSON object with two attributes: title and message. The message must be HTML inside a single div, without styles, "
    "to be injected into a predefined mail, and may include humour related to the webinar."
)

FALLBACK_TITLES = {
    "reminder": "Reminder: {title} starts in 30 minutes",
    "attendee_joined": "You are registered for {title}",
    "attendee_left": "Your registration for {title} was cancelled",
    "webinar_cancelled": "{title} has been cancelled",
}


class ComposedMail(BaseModel):
    title: str
    message: str


class CompositionError(Exception):
    pass


def get_client() -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout,
        http_client=httpx.AsyncClient(timeout=httpx.Timeout(settings.openai_timeout, connect=10.0)),
    )


def build_context(kind: str, webinar: dict[str, Any], user: dict[str, Any] | None) -> str:
    context = f"Kind of email: {kind}. Webinar: {json.dumps(webinar, ensure_ascii=False)}."
    if user:
        context += f" User: {json.dumps(user, ensure_ascii=False)}"
    return context


def fallback(kind: str, webinar: dict[str, Any]) -> ComposedMail:
    title = FALLBACK_TITLES[kind].format(title=webinar["title"])
    return ComposedMail(title=title, message=f"<div><p>{escape(title)}.</p></div>")


async def compose(kind: str, webinar: dict[str, Any], user: dict[str, Any] | None = None) -> ComposedMail:
    """
    Ask the model for the subject and html body of a notification.

    Without a configured api key a static mail is returned. Raises `CompositionError` if the model answer is unusable.
    """

    if not settings.openai_api_key:
        return fallback(kind, webinar)

    client = get_client()
    try:
        completion = await client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {
                    "role": "system",
                    "content": SYSTEM_PROMPT.format(app_name=settings.app_name, language=settings.mail_language),
                },
                {
                    "role": "user",
                    "content": f"Write an email for the following data: {build_context(kind, webinar, user)}",
                },
            ],
            response_format={"type": "json_object"},
        )
    finally:
        await client.close()

    content = completion.choices[0].message.content or ""
    logger.debug("completion for %s: %s", kind, content)
    try:
        return ComposedMail.model_validate_json(content)
    except ValidationError as e:
        raise CompositionError(f"Invalid completion for {kind}") from e
