import enum
from typing import Any

from ..logger import get_logger
from ..settings import settings
from ..utils.email import NOTIFICATION
from .composer import compose


logger = get_logger(__name__)


class NotificationKind(enum.Enum):
    REMINDER = "reminder"
    ATTENDEE_JOINED = "attendee_joined"
    ATTENDEE_LEFT = "attendee_left"
    WEBINAR_CANCELLED = "webinar_cancelled"


def mail_context(webinar: dict[str, Any]) -> dict[str, Any]:
    """The webinar fields exposed to the mail composer."""

    return {key: webinar[key] for key in ("title", "description", "presenter", "date", "duration")}


async def notify(
    kind: NotificationKind, recipients: list[str], webinar: dict[str, Any], user: dict[str, Any] | None = None
) -> None:
    """
    Compose and send a notification mail.

    Fire-and-forget: every failure is logged and swallowed so the triggering operation is never affected.
    """

    recipients = [email for email in recipients if email]
    if not recipients:
        logger.debug("no recipients for %s notification of webinar %s", kind.value, webinar.get("id"))
        return

    try:
        mail = await compose(kind.value, mail_context(webinar), user)
        await NOTIFICATION.send(
            recipients,
            mail.title,
            language=settings.mail_language,
            title=mail.title,
            app_name=settings.app_name,
            message=mail.message,
            webinar_title=webinar["title"],
            webinar_date=webinar["date"],
            webinar_duration=webinar["duration"],
            webinar_presenter=webinar["presenter"],
            webinar_link=webinar["registration_link"],
        )
    except Exception:
        logger.exception("could not send %s notification for webinar %s", kind.value, webinar.get("id"))
        return

    logger.info("sent %s notification for webinar %s to %d recipient(s)", kind.value, webinar["id"], len(recipients))
