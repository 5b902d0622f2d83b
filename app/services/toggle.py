import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.exceptions import InvalidArgument, Unauthorized
from app.models import Predicate, TargetKind
from app.services.ids import parse_id
from app.services.relationships import RelationshipStore, Target

logger = logging.getLogger(__name__)
settings = get_settings()

# Predicates that make sense for each kind of target
ALLOWED_PREDICATES = {
    TargetKind.VIDEO: {Predicate.LIKE, Predicate.DISLIKE},
    TargetKind.COMMENT: {Predicate.LIKE, Predicate.DISLIKE},
    TargetKind.TWEET: {Predicate.LIKE, Predicate.DISLIKE},
    TargetKind.CHANNEL: {Predicate.SUBSCRIBE},
}

OPPOSITE_REACTION = {
    Predicate.LIKE: Predicate.DISLIKE,
    Predicate.DISLIKE: Predicate.LIKE,
}


@dataclass(frozen=True)
class ToggleResult:
    active: bool
    count: Optional[int]


class ToggleEngine:
    """Flips a subject's edge on a target and reports the resulting state."""

    def __init__(self, db: AsyncSession, exclusive_reactions: Optional[bool] = None):
        self.db = db
        self.store = RelationshipStore(db)
        if exclusive_reactions is None:
            exclusive_reactions = settings.EXCLUSIVE_REACTIONS
        self.exclusive_reactions = exclusive_reactions

    async def toggle(
        self,
        subject_id: Optional[UUID],
        predicate: Predicate,
        kind: TargetKind,
        target_id,
    ) -> ToggleResult:
        """
        Delete the edge if present, otherwise create it.

        The count is read back after commit; tweets report no count.
        """
        if subject_id is None:
            raise Unauthorized()
        if predicate not in ALLOWED_PREDICATES[kind]:
            raise InvalidArgument(f"Cannot {predicate.value} a {kind.value}")
        target = Target(kind, parse_id(target_id, f"{kind.value} id"))

        await self.store.ensure_target(target)

        try:
            removed = await self.store.delete_edge(subject_id, predicate, target)
            if not removed:
                await self.store.upsert_edge(subject_id, predicate, target)
                opposite = OPPOSITE_REACTION.get(predicate)
                if self.exclusive_reactions and opposite is not None:
                    await self.store.delete_edge(subject_id, opposite, target)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        active = await self.store.has_edge(subject_id, predicate, target)
        count = await self.store.count_edges(predicate, target) if target.reports_count else None

        logger.info(
            f"Toggled {predicate.value} {kind.value}={target.id} by {subject_id}: "
            f"active={active}, count={count}"
        )
        return ToggleResult(active=active, count=count)

    async def status(self, subject_id: Optional[UUID], predicate: Predicate, kind: TargetKind, target_id) -> ToggleResult:
        """Current state without flipping it."""
        target = Target(kind, parse_id(target_id, f"{kind.value} id"))
        await self.store.ensure_target(target)
        active = await self.store.has_edge(subject_id, predicate, target)
        count = await self.store.count_edges(predicate, target) if target.reports_count else None
        return ToggleResult(active=active, count=count)

    async def clear(self, subject_id: UUID, predicate: Predicate, kind: Optional[TargetKind] = None) -> int:
        """Remove every edge of this predicate held by the subject."""
        if subject_id is None:
            raise Unauthorized()
        try:
            removed = await self.store.delete_subject_edges(subject_id, predicate, kind)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        logger.info(f"Cleared {removed} {predicate.value} edges of {subject_id}")
        return removed
