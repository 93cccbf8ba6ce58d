"""
Page controller base.

A page moves UNAUTHENTICATED -> LOADING -> READY (or ERROR when its
primary fetch fails). While READY it is either viewing or editing exactly
one record. Live subscriptions opened while loading belong to the page and
are released on unmount, on scope change and on sign-out. Signing in, or
switching to another user, reloads the page for the new identity.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional
from uuid import UUID

from pydantic import ValidationError

from tracker.core.exceptions import TrackerError
from tracker.core.logger import setup_logger
from tracker.interfaces.auth_provider import User
from tracker.services.realtime_service import Subscription
from tracker.services.session import SessionContext

logger = setup_logger(__name__)

Confirm = Callable[[str], Awaitable[bool]]


class PagePhase(str, Enum):
    """Page lifecycle phase."""

    UNAUTHENTICATED = "UNAUTHENTICATED"
    LOADING = "LOADING"
    READY = "READY"
    ERROR = "ERROR"


class PageController:
    """Shared state machine for every page."""

    def __init__(self, session: SessionContext, confirm: Confirm, user_timezone: str = "UTC"):
        self.session = session
        self.user_timezone = user_timezone
        self.phase = PagePhase.UNAUTHENTICATED
        self.editing_id: Optional[UUID] = None
        self.error: Optional[str] = None
        self._confirm = confirm
        self._pending: set[str] = set()
        self._subscriptions: list[Subscription] = []
        self._generation = 0
        self._mounted = False
        self._remove_session_listener: Optional[Callable[[], None]] = None
        self._loaded_user_id: Optional[str] = None
        self._reload_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    @property
    def subscription_count(self) -> int:
        return sum(1 for sub in self._subscriptions if sub.active)

    async def mount(self) -> None:
        """Attach the page and run the initial fetch or subscription."""
        self._mounted = True
        if self._remove_session_listener is None:
            self._remove_session_listener = self.session.add_listener(self._on_session_changed)
        await self.refresh()

    async def unmount(self) -> None:
        """Detach the page. Results still in flight are discarded."""
        self._mounted = False
        self._generation += 1
        self._release_subscriptions()
        if self._remove_session_listener is not None:
            self._remove_session_listener()
            self._remove_session_listener = None

    async def refresh(self) -> None:
        """(Re)load the page's data, replacing any live subscriptions."""
        self._release_subscriptions()
        self._generation += 1
        generation = self._generation
        self._loaded_user_id = self.session.user_id

        if not self.session.is_active:
            self.phase = PagePhase.UNAUTHENTICATED
            self.editing_id = None
            self._reset()
            return

        self.phase = PagePhase.LOADING
        self.error = None
        try:
            await self._load(generation)
        except TrackerError as exc:
            if self._is_current(generation):
                logger.warning("%s failed to load: %s", type(self).__name__, exc.message)
                self.phase = PagePhase.ERROR
                self.error = exc.message
            return

        if self._is_current(generation):
            self.phase = PagePhase.READY

    async def wait_for_reload(self) -> None:
        """Wait for a reload started by a sign-in or user switch."""
        task = self._reload_task
        if task is not None:
            await task

    def _on_session_changed(self, user: Optional[User]) -> None:
        if user is not None and user.id == self._loaded_user_id:
            return

        # data and listeners belong to the previous identity
        self._generation += 1
        self._release_subscriptions()
        self.editing_id = None
        self.error = None
        self._reset()

        if user is None:
            self._loaded_user_id = None
            self.phase = PagePhase.UNAUTHENTICATED
            return

        self._loaded_user_id = user.id
        self.phase = PagePhase.LOADING
        if self._mounted:
            self._reload_task = asyncio.get_running_loop().create_task(self.refresh())

    def _is_current(self, generation: int) -> bool:
        return self._mounted and generation == self._generation

    def _keep(self, generation: int, subscription: Subscription) -> None:
        """Own a subscription, or cancel it at once if the page moved on."""
        if self._is_current(generation):
            self._subscriptions.append(subscription)
        else:
            subscription.cancel()

    def _release_subscriptions(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []

    async def _load(self, generation: int) -> None:
        raise NotImplementedError

    def _reset(self) -> None:
        """Clear page data when the session ends."""
        pass

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def start_edit(self, record_id: UUID) -> bool:
        """Make one record editable (replacing any other). Only a READY page edits."""
        if self.phase != PagePhase.READY:
            return False
        self.editing_id = record_id
        return True

    def cancel_edit(self) -> None:
        self.editing_id = None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def run_mutation(self, key: str, action: Callable[[], Awaitable[object]]) -> bool:
        """
        Run a store mutation unless the same one is already in flight.

        Args:
            key: Identifies the submit control (e.g. "create", "update:<id>")
            action: Coroutine factory performing the mutation

        Returns:
            True if the mutation ran and succeeded
        """
        if key in self._pending:
            logger.debug("Ignoring duplicate submission of %s", key)
            return False
        self._pending.add(key)
        self.error = None
        try:
            await action()
        except TrackerError as exc:
            logger.warning("Mutation %s failed: %s", key, exc.message)
            self.error = exc.message
            return False
        except ValidationError as exc:
            logger.warning("Mutation %s rejected: %s", key, exc)
            self.error = _first_error(exc)
            return False
        finally:
            self._pending.discard(key)
        return True

    async def confirm_and_delete(
        self,
        message: str,
        key: str,
        action: Callable[[], Awaitable[object]],
    ) -> bool:
        """Ask for confirmation, then run the delete. Declining changes nothing."""
        if not await self._confirm(message):
            return False
        return await self.run_mutation(key, action)


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    return f"{field}: {error['msg']}" if field else error["msg"]
