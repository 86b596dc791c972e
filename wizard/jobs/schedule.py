from ..logger import get_logger
from ..services.attendance import reconcile
from ..settings import settings
from ..utils.scheduler import Scheduler
from .lifecycle import sweep
from .mirroring import mirror_all


logger = get_logger(__name__)


def create_scheduler() -> Scheduler:
    scheduler = Scheduler()

    scheduler.cron(settings.sweep_cron, name="webinar_sweep", timeout=settings.sweep_timeout)(sweep)
    scheduler.cron(settings.mirror_cron, name="mirror", timeout=settings.mirror_timeout)(mirror_all)
    if settings.reconcile_cron:
        scheduler.cron(settings.reconcile_cron, name="reconcile", timeout=settings.reconcile_timeout)(reconcile)
    else:
        logger.info("attendance reconciliation is disabled")

    return scheduler
