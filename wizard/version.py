from importlib.metadata import PackageNotFoundError, version as package_version


NAME = "webinar-wizard-ms"

try:
    VERSION = package_version(NAME)
except PackageNotFoundError:
    VERSION = "unknown"


def get_version() -> str:
    return VERSION
