"""Per-build-unit execution, sequential or on a bounded thread pool."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from threading import Event
from typing import Callable, Dict, Optional, Sequence, TypeVar

from tqdm import tqdm

from modpacker.core.errors import PipelineCancelled
from modpacker.core.logger import setup_logger

logger = setup_logger(__name__)

T = TypeVar("T")


def check_cancelled(cancel_flag: Optional[Event], where: str) -> None:
    if cancel_flag is not None and cancel_flag.is_set():
        logger.info("Cancelled %s", where)
        raise PipelineCancelled(f"Cancelled {where}")


def run_for_each(
    items: Sequence[T],
    action: Callable[[T], None],
    label: Callable[[T], str],
    max_workers: int = 1,
    cancel_flag: Optional[Event] = None,
    desc: str = "",
    show_progress: bool = False,
) -> None:
    """Run ``action`` once per item, stopping at the first failure.

    The cancel flag is checked before each item starts. With more than one
    worker, items still queued when an error occurs are not started, and the
    first error is re-raised once running items finish.
    """
    if not items:
        return

    progress = tqdm(total=len(items), desc=desc, unit="unit", disable=not show_progress)
    try:
        if max_workers <= 1:
            for item in items:
                check_cancelled(cancel_flag, f"before {label(item)}")
                action(item)
                progress.update(1)
            return

        def guarded(item: T) -> None:
            check_cancelled(cancel_flag, f"before {label(item)}")
            action(item)

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Unit") as executor:
            futures: Dict[Future, T] = {executor.submit(guarded, item): item for item in items}
            pending = set(futures)
            while pending:
                done, pending = wait(pending, return_when=FIRST_EXCEPTION)
                progress.update(len(done))
                failed = [f for f in done if f.exception() is not None]
                if failed:
                    for future in pending:
                        future.cancel()
                    error = failed[0].exception()
                    logger.error("%s failed: %s", label(futures[failed[0]]), error)
                    raise error
    finally:
        progress.close()
