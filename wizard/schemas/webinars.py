from typing import Annotated

from pydantic import AfterValidator, BaseModel, Field

from ..utils.clock import is_valid_date


def _check_date(value: str) -> str:
    if not is_valid_date(value):
        raise ValueError("date must use the format DD/MM/YYYY HH:mm:ss")
    return value


DateString = Annotated[str, AfterValidator(_check_date)]


class Webinar(BaseModel):
    id: str = Field(description="Unique identifier of the webinar")
    title: str = Field(description="Title of the webinar")
    slug: str = Field(description="URL friendly identifier derived from the title")
    description: str = Field(description="Description of the webinar")
    presenter: str = Field(description="Name of the presenter")
    registration_link: str = Field(description="Registration link")
    date: str = Field(description="Start date (DD/MM/YYYY HH:mm:ss, service timezone)")
    duration: int = Field(description="Duration of the webinar in minutes")
    status: str = Field(description="One of scheduled, in-progress, completed")
    max_attendees: int = Field(description="Maximum number of attendees")
    attendees: int | list[str] = Field(description="Attendee count, or the caller's own id for clients")
    created_by: str | None = Field(None, description="ID of the user who created the webinar")
    created_at: str = Field(description="Creation date")
    updated_at: str = Field(description="Date of the last update")


class Pagination(BaseModel):
    total: int = Field(description="Total number of matching webinars")
    limit: int = Field(description="Page size")
    offset: int = Field(description="Index of the first webinar of this page")


class WebinarList(BaseModel):
    pagination: Pagination | None = Field(None, description="Pagination metadata (absent for my-webinars)")
    webinars: list[Webinar] = Field(description="Webinars of this page")


class CreateWebinar(BaseModel):
    title: str = Field(min_length=1, max_length=256, description="Title of the webinar")
    description: str = Field(max_length=4096, description="Description of the webinar")
    presenter: str = Field(max_length=256, description="Name of the presenter")
    registration_link: str = Field(max_length=256, description="Registration link")
    date: DateString = Field(description="Start date (DD/MM/YYYY HH:mm:ss, service timezone)")
    duration: int = Field(ge=10, description="Duration of the webinar in minutes")
    max_attendees: int = Field(ge=10, description="Maximum number of attendees")


class UpdateWebinar(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=256, description="Title of the webinar")
    description: str | None = Field(None, max_length=4096, description="Description of the webinar")
    presenter: str | None = Field(None, max_length=256, description="Name of the presenter")
    registration_link: str | None = Field(None, max_length=256, description="Registration link")
    date: DateString | None = Field(None, description="Start date (DD/MM/YYYY HH:mm:ss, service timezone)")
    duration: int | None = Field(None, ge=10, description="Duration of the webinar in minutes")
    status: str | None = Field(None, pattern=r"^(scheduled|in-progress|completed)$", description="Webinar status")
    max_attendees: int | None = Field(None, ge=10, description="Maximum number of attendees")
