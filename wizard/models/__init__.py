from .images import Image
from .roles import Role, ValidRole
from .tracks import Track
from .users import User
from .webinars import Webinar, WebinarStatus


__all__ = [
    "Image",
    "Role",
    "Track",
    "User",
    "ValidRole",
    "Webinar",
    "WebinarStatus",
]
