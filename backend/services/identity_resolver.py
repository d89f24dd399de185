"""
Resolves the provider assistant id to use for a call or campaign action.

Strategies are tried in order and the first one that produces an id wins:

1. explicit remote id from the caller
2. provider assistant whose name loosely matches the hinted name
3. local record for the hinted local id (its remote id, or the local id
   itself when the provider knows it)
4. cached selection (its remote id, or a name match on its name)
5. any provider assistant, preferring a loose name match
6. the configured fallback assistant, marked degraded

A failing strategy (timeout, network error, local store error) counts as
"nothing found" and the cascade moves on. Only exhausting every strategy
with no fallback configured raises NoIdentityResolved.
"""

from typing import Awaitable, Callable, List, Optional

from sqlalchemy.orm import Session

from backend.core.config import settings
from backend.core.exceptions import DispatchError, NoIdentityResolved
from backend.core.logging import get_logger
from backend.db.repositories import AssistantRepository, assistant_repository
from backend.schemas.assistant import RemoteAssistant
from backend.schemas.dispatch import Resolution, ResolutionHints, ResolutionSource
from backend.services.session_state import SelectionCache
from backend.services.vapi_service import VapiService

logger = get_logger(__name__)

Strategy = Callable[[ResolutionHints], Awaitable[Optional[Resolution]]]


def names_match(candidate: Optional[str], wanted: Optional[str]) -> bool:
    """Case-insensitive substring match in either direction"""
    if not candidate or not wanted:
        return False
    candidate = candidate.strip().lower()
    wanted = wanted.strip().lower()
    if not candidate or not wanted:
        return False
    return wanted in candidate or candidate in wanted


def first_name_match(assistants: List[RemoteAssistant], name: Optional[str]) -> Optional[RemoteAssistant]:
    for assistant in assistants:
        if names_match(assistant.name, name):
            return assistant
    return None


class IdentityResolver:
    """Ordered cascade of identity strategies"""

    def __init__(
        self,
        vapi: VapiService,
        db: Optional[Session] = None,
        selection: Optional[SelectionCache] = None,
        repository: AssistantRepository = assistant_repository,
        fallback_id: Optional[str] = None,
        fallback_name: Optional[str] = None,
    ):
        self.vapi = vapi
        self.db = db
        self.selection = selection
        self.repository = repository
        self.fallback_id = settings.FALLBACK_ASSISTANT_ID if fallback_id is None else fallback_id
        self.fallback_name = fallback_name or settings.FALLBACK_ASSISTANT_NAME

        self.strategies: List[Strategy] = [
            self.from_explicit_remote_id,
            self.from_name,
            self.from_local_id,
            self.from_cached_selection,
            self.from_catalog_scan,
        ]

    async def resolve(self, hints: ResolutionHints) -> Resolution:
        """
        Run the cascade and return the first resolution found.

        Raises:
            NoIdentityResolved: nothing matched and no fallback id is configured
        """
        for strategy in self.strategies:
            try:
                resolution = await strategy(hints)
            except DispatchError as e:
                name = getattr(strategy, "__name__", repr(strategy))
                logger.warning(f"Identity strategy {name} failed: {e}")
                continue

            if resolution:
                logger.info(
                    f"Resolved assistant {resolution.remote_id} via {resolution.source.value}"
                )
                return resolution

        return self.fallback(hints)

    async def from_explicit_remote_id(self, hints: ResolutionHints) -> Optional[Resolution]:
        if not hints.remote_id:
            return None
        return Resolution(
            remote_id=hints.remote_id,
            source=ResolutionSource.EXPLICIT,
            local_id=hints.local_id,
            name=hints.name,
        )

    async def from_name(self, hints: ResolutionHints) -> Optional[Resolution]:
        if not hints.name:
            return None
        return await self._match_remote_name(hints.name, ResolutionSource.NAME_MATCH, hints.local_id)

    async def from_local_id(self, hints: ResolutionHints) -> Optional[Resolution]:
        if not hints.local_id:
            return None

        record = None
        if self.db is not None:
            record = self.repository.get_record(self.db, hints.local_id)

        if record and hints.owner_id and record.owner_id != str(hints.owner_id):
            logger.warning(
                f"Local assistant {hints.local_id} belongs to another owner, ignoring it for {hints.owner_id}"
            )
            return None

        if record and record.remote_id:
            return Resolution(
                remote_id=record.remote_id,
                source=ResolutionSource.LOCAL_RECORD,
                local_id=record.local_id,
                name=record.name,
            )

        # Local and remote ids coincide for assistants created directly on the provider
        remote = await self.vapi.get_by_id(hints.local_id)
        if remote:
            return Resolution(
                remote_id=remote.id,
                source=ResolutionSource.LOCAL_RECORD,
                local_id=record.local_id if record else None,
                name=remote.name or (record.name if record else None),
            )
        return None

    async def from_cached_selection(self, hints: ResolutionHints) -> Optional[Resolution]:
        if self.selection is None:
            return None

        cached = self.selection.get()
        if cached is None:
            return None

        if cached.remote_id:
            return Resolution(
                remote_id=cached.remote_id,
                source=ResolutionSource.CACHED_SELECTION,
                local_id=cached.local_id,
                name=cached.name,
            )

        if cached.name:
            return await self._match_remote_name(
                cached.name, ResolutionSource.CACHED_SELECTION, cached.local_id
            )
        return None

    async def from_catalog_scan(self, hints: ResolutionHints) -> Optional[Resolution]:
        assistants = await self.vapi.list_all()
        if not assistants:
            return None

        wanted = hints.name
        if not wanted and self.selection is not None:
            cached = self.selection.get()
            wanted = cached.name if cached else None

        chosen = first_name_match(assistants, wanted) or assistants[0]
        return Resolution(
            remote_id=chosen.id,
            source=ResolutionSource.CATALOG_SCAN,
            local_id=hints.local_id,
            name=chosen.name,
        )

    def fallback(self, hints: ResolutionHints) -> Resolution:
        if not self.fallback_id:
            logger.error("No assistant id could be resolved and no fallback is configured")
            raise NoIdentityResolved("No assistant selected or the selected id is invalid")

        logger.warning(f"Using fallback assistant {self.fallback_id} as a last resort")
        return Resolution(
            remote_id=self.fallback_id,
            source=ResolutionSource.FALLBACK,
            local_id=hints.local_id,
            name=self.fallback_name,
            degraded=True,
        )

    async def _match_remote_name(
        self,
        name: str,
        source: ResolutionSource,
        local_id: Optional[str],
    ) -> Optional[Resolution]:
        match = first_name_match(await self.vapi.list_all(), name)
        if not match:
            logger.info(f"No provider assistant matches name '{name}'")
            return None
        return Resolution(remote_id=match.id, source=source, local_id=local_id, name=match.name)
