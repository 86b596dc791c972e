from starlette import status

from .api_exception import APIException


class WebinarNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Webinar not found"
    description = "The requested webinar does not exist."


class WebinarDeletedError(APIException):
    status_code = status.HTTP_410_GONE
    detail = "Webinar deleted"
    description = "The webinar has been cancelled and no longer accepts attendance changes."


class AlreadyAttendingError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Already attending"
    description = "The user is already registered for this webinar."


class NotAttendingError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Not attending"
    description = "The user is not registered for this webinar."


class WebinarFullError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Webinar full"
    description = "The webinar has reached its maximum number of attendees."


class SlugAlreadyExistsError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Slug already exists"
    description = "Another webinar already uses a title that produces the same slug."


class InvalidStateTransitionError(APIException):
    status_code = status.HTTP_409_CONFLICT
    detail = "Invalid state transition"
    description = "The webinar status can only move forward: scheduled, in-progress, completed."

    def __init__(self, current: str, target: str):
        super().__init__()

        self.detail = {"msg": self.detail, "current": current, "target": target}
