"""
Concurrent fan-out of one query to every configured provider.

Each provider call runs as its own asyncio task and writes only its own slot
in the session. Nothing waits on all providers: outcomes are reported one by
one as they settle, and a session is done once no slot is Pending.

A new dispatch supersedes the previous session without cancelling it. Late
results from a superseded session still settle in that session's own map but
are not forwarded to the dispatcher's update callback.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, List, Mapping, Optional, Sequence

from .credentials import resolve
from .errors import MissingCredential
from .models import PENDING, Failure, ProviderId, ProviderOutcome, QueryRequest, is_terminal
from .providers import ProviderAdapter, build_adapters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutcomeUpdate:
    """One provider's transition to a terminal outcome within a session."""
    session_id: str
    provider: ProviderId
    outcome: ProviderOutcome


UpdateCallback = Callable[[OutcomeUpdate], None]


class DispatchSession:
    """
    Outcomes of one submitted query, one slot per provider.

    Slots start Pending and move to Success or Failure exactly once. No slot
    is ever removed or reset.
    """

    def __init__(self, request: QueryRequest, providers: Sequence[ProviderId]):
        self.session_id = uuid.uuid4().hex
        self.request = request
        self._outcomes: Dict[ProviderId, ProviderOutcome] = {
            provider: PENDING for provider in providers
        }
        self._tasks: Dict[ProviderId, asyncio.Task] = {}
        self._updates: "asyncio.Queue[OutcomeUpdate]" = asyncio.Queue()
        self._done = asyncio.Event()
        if not self._outcomes:
            self._done.set()

    @property
    def outcomes(self) -> Dict[ProviderId, ProviderOutcome]:
        """Snapshot of every provider's current outcome."""
        return dict(self._outcomes)

    @property
    def providers(self) -> List[ProviderId]:
        return list(self._outcomes)

    @property
    def tasks(self) -> Dict[ProviderId, asyncio.Task]:
        """In-flight or finished call tasks; providers failed before dispatch have none."""
        return dict(self._tasks)

    def outcome(self, provider: ProviderId) -> ProviderOutcome:
        return self._outcomes[provider]

    def pending(self) -> List[ProviderId]:
        return [p for p, outcome in self._outcomes.items() if not is_terminal(outcome)]

    @property
    def done(self) -> bool:
        return not self.pending()

    def settle(self, provider: ProviderId, outcome: ProviderOutcome) -> OutcomeUpdate:
        """
        Record a provider's terminal outcome.

        Raises:
            ValueError: If the outcome is Pending or the provider already settled
        """
        if not is_terminal(outcome):
            raise ValueError("A provider can only settle to Success or Failure")
        if is_terminal(self._outcomes[provider]):
            raise ValueError(f"{provider.display_name} already settled in session {self.session_id}")

        self._outcomes[provider] = outcome
        update = OutcomeUpdate(self.session_id, provider, outcome)
        self._updates.put_nowait(update)
        if self.done:
            self._done.set()
        return update

    async def wait(self) -> Dict[ProviderId, ProviderOutcome]:
        """Wait until no provider is Pending and return the outcomes."""
        await self._done.wait()
        return self.outcomes

    async def updates(self) -> AsyncIterator[OutcomeUpdate]:
        """
        Yield each provider's update in completion order, then stop.

        Intended for a single consumer.
        """
        for _ in range(len(self._outcomes)):
            yield await self._updates.get()


class FanOutDispatcher:
    """
    Sends a query to all configured providers at once.

    Args:
        adapters: Adapter per provider; defaults to one of each
        providers: Providers to query, in display order; defaults to all adapters
        defaults: Process-wide default keys; read from the environment if omitted
        on_update: Called with every terminal update of the current session
    """

    def __init__(
        self,
        adapters: Optional[Mapping[ProviderId, ProviderAdapter]] = None,
        providers: Optional[Sequence[ProviderId]] = None,
        defaults: Optional[Mapping[ProviderId, Optional[str]]] = None,
        on_update: Optional[UpdateCallback] = None
    ):
        self.adapters = dict(adapters) if adapters is not None else build_adapters()
        self.providers = list(providers) if providers is not None else list(self.adapters)
        missing = [p.value for p in self.providers if p not in self.adapters]
        if missing:
            raise ValueError(f"No adapter configured for providers: {missing}")
        self.defaults = defaults
        self.on_update = on_update
        self._current: Optional[DispatchSession] = None

    @property
    def current(self) -> Optional[DispatchSession]:
        return self._current

    def is_current(self, session_id: str) -> bool:
        return self._current is not None and self._current.session_id == session_id

    def dispatch(
        self,
        request: QueryRequest,
        credentials: Optional[Mapping[ProviderId, Optional[str]]] = None
    ) -> DispatchSession:
        """
        Start one independent call per provider and return immediately.

        Must be called from a running event loop.

        Args:
            request: The user's query
            credentials: Caller-supplied keys per provider, preferred over defaults

        Returns:
            The new session, which becomes the current one
        """
        credentials = credentials or {}
        session = DispatchSession(request, self.providers)
        if self._current is not None and not self._current.done:
            logger.info(
                "Session %s superseded with %d provider(s) still pending",
                self._current.session_id, len(self._current.pending())
            )
        self._current = session
        logger.info(
            "Dispatching session %s to %s",
            session.session_id, ", ".join(p.value for p in self.providers)
        )

        for provider in self.providers:
            try:
                credential = resolve(provider, credentials.get(provider), self.defaults)
            except MissingCredential as e:
                logger.warning("%s skipped: %s", provider.display_name, e.reason)
                self._settle(session, provider, e.to_outcome())
                continue

            adapter = self.adapters[provider]
            session._tasks[provider] = asyncio.create_task(
                self._run(session, provider, adapter, credential),
                name=f"ezarg-{provider.value}-{session.session_id[:8]}"
            )

        return session

    async def _run(
        self,
        session: DispatchSession,
        provider: ProviderId,
        adapter: ProviderAdapter,
        credential: str
    ):
        try:
            outcome = await adapter.query(session.request, credential)
        except Exception as e:
            # Unexpected errors stay scoped to this provider.
            logger.exception("Unexpected error querying %s", provider.display_name)
            outcome = Failure(provider, str(e) or type(e).__name__, kind=type(e).__name__)
        self._settle(session, provider, outcome)

    def _settle(self, session: DispatchSession, provider: ProviderId, outcome: ProviderOutcome):
        update = session.settle(provider, outcome)
        if not self.is_current(session.session_id):
            logger.debug(
                "Discarding stale %s update from session %s",
                provider.display_name, session.session_id
            )
            return
        if self.on_update is None:
            return
        try:
            self.on_update(update)
        except Exception:
            # Callback errors belong to the caller, not to the session.
            logger.exception(
                "Update callback failed for %s in session %s",
                provider.display_name, session.session_id
            )
