"""Per-guild mailboxes that run queue operations one at a time, in arrival order."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[Any]]


class MailboxClosedError(RuntimeError):
    """Raised for operations submitted to, or still pending in, a closed mailbox."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(f"Mailbox for guild {guild_id} is closed")
        self.guild_id = guild_id


class GroupMailbox:
    """Single-consumer operation queue for one guild.

    Commands and voice notifications for the same guild are submitted here and
    executed strictly one after another by a single worker task, so no two
    operations ever interleave on the guild's queue.
    """

    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        self._inbox: asyncio.Queue[tuple[Operation, asyncio.Future[Any]]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._busy = False
        self._closed = False

    @property
    def is_idle(self) -> bool:
        """True when no operation is running or waiting."""
        return not self._busy and self._inbox.empty()

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def submit(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Queue *operation* and wait for its result.

        Exceptions raised by the operation are re-raised in the caller.
        """
        if self._closed:
            raise MailboxClosedError(self.guild_id)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._inbox.put_nowait((operation, future))
        self._ensure_worker()
        return await future

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(
                self._run(), name=f"guild-mailbox-{self.guild_id}"
            )

    async def _run(self) -> None:
        while True:
            operation, future = await self._inbox.get()
            if future.cancelled():
                continue

            self._busy = True
            try:
                result = await operation()
            except asyncio.CancelledError:
                future.cancel()
                raise
            except Exception as exc:
                logger.debug(LogTemplates.MAILBOX_OPERATION_FAILED, self.guild_id, exc_info=True)
                if not future.done():
                    future.set_exception(exc)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._busy = False

    async def close(self) -> None:
        """Stop the worker and fail anything still waiting."""
        self._closed = True
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._worker
        self._worker = None

        while not self._inbox.empty():
            _, future = self._inbox.get_nowait()
            if not future.done():
                future.set_exception(MailboxClosedError(self.guild_id))


class MailboxRegistry:
    """Creates one mailbox per guild on demand and disposes of them."""

    def __init__(self) -> None:
        self._mailboxes: dict[int, GroupMailbox] = {}

    def get(self, guild_id: int) -> GroupMailbox:
        mailbox = self._mailboxes.get(guild_id)
        if mailbox is None or mailbox.is_closed:
            mailbox = GroupMailbox(guild_id)
            self._mailboxes[guild_id] = mailbox
            logger.debug(LogTemplates.MAILBOX_CREATED, guild_id)
        return mailbox

    async def submit(self, guild_id: int, operation: Callable[[], Awaitable[T]]) -> T:
        return await self.get(guild_id).submit(operation)

    async def release(self, guild_id: int) -> bool:
        """Close a guild's mailbox if it has nothing running or waiting.

        Returns:
            True if the mailbox was closed and dropped.
        """
        mailbox = self._mailboxes.get(guild_id)
        if mailbox is None or not mailbox.is_idle:
            return False

        del self._mailboxes[guild_id]
        await mailbox.close()
        logger.debug(LogTemplates.MAILBOX_CLOSED, guild_id)
        return True

    async def close_all(self) -> None:
        mailboxes = list(self._mailboxes.values())
        self._mailboxes.clear()
        for mailbox in mailboxes:
            await mailbox.close()

    def __len__(self) -> int:
        return len(self._mailboxes)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._mailboxes
