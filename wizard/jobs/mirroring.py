"""Periodic full copy of the production collections into the mirror stores."""

from dataclasses import dataclass, field
from typing import Any, Type

from ..database import DB, Base, backup_db, db, delete, select, test_db
from ..logger import get_logger
from ..models import Image, Role, Track, User, Webinar


logger = get_logger(__name__)

# referenced collections first, so dependents find their references in place
COLLECTIONS: list[Type[Base]] = [Role, User, Image, Track, Webinar]


@dataclass
class MirrorReport:
    target: str
    copied: dict[str, int] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def clone(row: Any) -> Any:
    """Create a detached copy of a row with the same primary key and column values."""

    cls = type(row)
    return cls(**{column.key: getattr(row, column.key) for column in cls.__mapper__.column_attrs})


async def replace_collection(target: DB, model: Type[Base], rows: list[Any]) -> None:
    """Replace all rows of one collection in `target`."""

    async with target.context():
        await target.exec(delete(model))
        await target.add_all([clone(row) for row in rows])


async def mirror(target: DB, name: str, source: DB = db) -> MirrorReport:
    """
    Copy every collection from `source` into `target`.

    Each collection is replaced in its own transaction. A failing collection is logged and reported and the
    remaining collections are still copied, so a failed run can leave a partial mirror behind.
    """

    report = MirrorReport(target=name)
    logger.info("mirroring production data into %s store", name)

    snapshot: dict[Type[Base], list[Any]] = {}
    async with source.context():
        for model in COLLECTIONS:
            try:
                snapshot[model] = await source.all(select(model))
            except Exception:
                logger.exception("could not read collection %s", model.__tablename__)
                report.failed.append(model.__tablename__)
                await source.rollback()

    for model, rows in snapshot.items():
        collection = model.__tablename__
        try:
            await replace_collection(target, model, rows)
        except Exception:
            logger.exception("could not mirror collection %s into %s store", collection, name)
            report.failed.append(collection)
            continue
        report.copied[collection] = len(rows)

    if report.failed:
        logger.error("mirror into %s store incomplete, failed collections: %s", name, ", ".join(report.failed))
    else:
        logger.info("mirrored %s into %s store", report.copied, name)
    return report


def mirror_targets() -> list[tuple[str, DB]]:
    targets = [("backup", backup_db)]
    if test_db is not None:
        targets.append(("test", test_db))
    return targets


async def mirror_all() -> list[MirrorReport]:
    return [await mirror(target, name) for name, target in mirror_targets()]
