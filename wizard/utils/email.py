from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from pathlib import Path
from smtplib import SMTP, SMTP_SSL
from typing import Any

from ..logger import get_logger
from ..settings import settings
from .async_thread import run_in_thread


logger = get_logger(__name__)

TEMPLATES = Path(__file__).parent.parent / "templates"


class Message:
    def __init__(self, path: str, markup: tuple[str, ...] = ()):
        self.path = path
        self.markup = markup

    @property
    def content(self) -> str:
        return TEMPLATES.joinpath(f"{self.path}.html").read_text()

    def render(self, **kwargs: Any) -> str:
        """Fill the template. Values are html escaped unless their name is listed in `markup`."""

        return self.content.format(
            **{key: value if key in self.markup else escape(str(value)) for key, value in kwargs.items()}
        )

    async def send(self, recipients: list[str], title: str, **kwargs: Any) -> None:
        await send_email(recipients, title, self.render(**kwargs), "html")


@run_in_thread
def send_email(recipients: list[str], title: str, body: str, content_type: str = "plain") -> None:
    logger.debug("sending email '%s' to %d recipient(s)", title, len(recipients))

    msg = MIMEMultipart()
    msg["From"] = settings.smtp_from
    msg["To"] = ", ".join(recipients)
    msg["Subject"] = title
    msg.attach(MIMEText(body, content_type))

    smtp = SMTP_SSL if settings.smtp_tls else SMTP
    with smtp(settings.smtp_host, settings.smtp_port) as connection:
        if settings.smtp_starttls:
            connection.starttls()
        if settings.smtp_user:
            connection.login(settings.smtp_user, settings.smtp_password)
        connection.sendmail(settings.smtp_from, recipients, msg.as_string())


NOTIFICATION = Message("notification", markup=("message",))
