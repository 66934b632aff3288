"""Drives the inbox poller over every tracked address on a timer or on demand."""

import asyncio

import structlog

logger = structlog.get_logger()


class Scheduler:
    def __init__(self, store, poller, interval_ms=60000):
        self.store = store
        self.poller = poller
        self.interval_ms = interval_ms

    @property
    def interval_seconds(self):
        return self.interval_ms / 1000

    async def sweep_user(self, user_id):
        """Poll each of one user's addresses in tracked order."""
        state = self.store.get_user(user_id)
        if state is None:
            return 0
        total = 0
        # Copy: the list may change while a poll is suspended.
        for address in list(state.tracked_addresses):
            total += await self.poller.poll(user_id, address)
        return total

    async def sweep_all(self):
        """One pass over every known user. Users are polled concurrently."""
        user_ids = self.store.user_ids()
        logger.debug("sweep_started", users=len(user_ids))
        results = await asyncio.gather(
            *(self.sweep_user(user_id) for user_id in user_ids),
            return_exceptions=True,
        )
        total = 0
        for user_id, result in zip(user_ids, results):
            if isinstance(result, BaseException):
                logger.error("sweep_user_failed", user_id=user_id, error=str(result))
                continue
            total += result
        logger.debug("sweep_finished", users=len(user_ids), notified=total)
        return total

    async def run_job(self, context):
        """JobQueue callback for the periodic sweep."""
        await self.sweep_all()

    def schedule(self, job_queue, first=5):
        """Register the repeating sweep; the first one runs shortly after startup."""
        logger.info("sweep_scheduled", interval_ms=self.interval_ms)
        return job_queue.run_repeating(
            self.run_job,
            interval=self.interval_seconds,
            first=first,
            name="inbox-sweep",
            job_kwargs={"max_instances": 3},
        )
