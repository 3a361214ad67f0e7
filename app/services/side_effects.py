import logging
from typing import Awaitable, Callable, List, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

SideEffect = Tuple[str, Callable[[], Awaitable[object]]]


async def run_post_commit(db: AsyncSession, tasks: Sequence[SideEffect]) -> List[str]:
    """
    Run best-effort follow-ups of an already committed operation.

    Each task runs in its own failure boundary: a failure is logged with its
    traceback and its partial writes are rolled back, the remaining tasks still
    run and the primary result stands. Returns the names of the failed tasks.
    """
    failed = []
    for name, task in tasks:
        try:
            await task()
        except Exception:
            logger.exception("Side effect '%s' failed", name)
            await db.rollback()
            failed.append(name)
    return failed
