from dataclasses import dataclass
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound
from app.models import Comment, Edge, Predicate, TargetKind, Tweet, User, Video

# Table holding each kind of target
TARGET_MODELS = {
    TargetKind.VIDEO: Video,
    TargetKind.COMMENT: Comment,
    TargetKind.TWEET: Tweet,
    TargetKind.CHANNEL: User,
}

# Tweet toggles do not report an aggregate count back
COUNTED_KINDS = frozenset({TargetKind.VIDEO, TargetKind.COMMENT, TargetKind.CHANNEL})


@dataclass(frozen=True)
class Target:
    kind: TargetKind
    id: UUID

    @property
    def model(self):
        return TARGET_MODELS[self.kind]

    @property
    def reports_count(self) -> bool:
        return self.kind in COUNTED_KINDS


class RelationshipStore:
    """Persistence for subject -> target edges (like, dislike, subscribe).

    Writes are flushed, not committed; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============ Targets ============

    async def ensure_target(self, target: Target) -> None:
        model = target.model
        result = await self.db.execute(select(model.id).where(model.id == target.id))
        if result.scalar_one_or_none() is None:
            raise NotFound(f"{target.kind.value.capitalize()} not found")

    # ============ Writes ============

    async def upsert_edge(self, subject_id: UUID, predicate: Predicate, target: Target) -> Edge:
        """Create the edge unless it already exists; returns the stored row."""
        existing = await self._find(subject_id, predicate, target)
        if existing is not None:
            return existing

        edge = Edge(
            subject_id=subject_id,
            predicate=predicate,
            target_kind=target.kind,
            target_id=target.id,
        )
        self.db.add(edge)
        try:
            await self.db.flush()
        except IntegrityError:
            # A concurrent insert of the same tuple won; coalesce onto it
            await self.db.rollback()
            existing = await self._find(subject_id, predicate, target)
            if existing is None:
                raise
            return existing
        return edge

    async def delete_edge(self, subject_id: UUID, predicate: Predicate, target: Target) -> bool:
        """Remove the edge; returns whether it existed."""
        result = await self.db.execute(
            delete(Edge).where(
                Edge.subject_id == subject_id,
                Edge.predicate == predicate,
                Edge.target_kind == target.kind,
                Edge.target_id == target.id,
            )
        )
        return result.rowcount > 0

    async def delete_subject_edges(
        self,
        subject_id: UUID,
        predicate: Predicate,
        kind: Optional[TargetKind] = None,
    ) -> int:
        stmt = delete(Edge).where(Edge.subject_id == subject_id, Edge.predicate == predicate)
        if kind is not None:
            stmt = stmt.where(Edge.target_kind == kind)
        result = await self.db.execute(stmt)
        return result.rowcount

    # ============ Single-target reads ============

    async def list_edges(self, predicate: Predicate, target: Target) -> list[Edge]:
        result = await self.db.execute(
            select(Edge)
            .where(
                Edge.predicate == predicate,
                Edge.target_kind == target.kind,
                Edge.target_id == target.id,
            )
            .order_by(Edge.created_at, Edge.id)
        )
        return list(result.scalars().all())

    async def count_edges(self, predicate: Predicate, target: Target) -> int:
        result = await self.db.execute(
            select(func.count(Edge.id)).where(
                Edge.predicate == predicate,
                Edge.target_kind == target.kind,
                Edge.target_id == target.id,
            )
        )
        return result.scalar_one()

    async def has_edge(self, subject_id: Optional[UUID], predicate: Predicate, target: Target) -> bool:
        if subject_id is None:
            return False
        return await self._find(subject_id, predicate, target) is not None

    async def subjects_of(self, predicate: Predicate, target: Target) -> list[UUID]:
        return [edge.subject_id for edge in await self.list_edges(predicate, target)]

    # ============ Batch reads ============

    async def count_by_target(
        self, predicate: Predicate, kind: TargetKind, target_ids: Iterable[UUID]
    ) -> dict[UUID, int]:
        """Edge counts per target; targets without edges are absent."""
        ids = list(target_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(Edge.target_id, func.count(Edge.id))
            .where(
                Edge.predicate == predicate,
                Edge.target_kind == kind,
                Edge.target_id.in_(ids),
            )
            .group_by(Edge.target_id)
        )
        return {target_id: count for target_id, count in result.all()}

    async def subject_targets(
        self,
        subject_id: Optional[UUID],
        predicate: Predicate,
        kind: TargetKind,
        target_ids: Iterable[UUID],
    ) -> set[UUID]:
        """The subset of target_ids the subject holds an edge on."""
        ids = list(target_ids)
        if subject_id is None or not ids:
            return set()
        result = await self.db.execute(
            select(Edge.target_id).where(
                Edge.subject_id == subject_id,
                Edge.predicate == predicate,
                Edge.target_kind == kind,
                Edge.target_id.in_(ids),
            )
        )
        return set(result.scalars().all())

    async def count_by_subject(self, predicate: Predicate, kind: TargetKind, subject_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Edge.id)).where(
                Edge.subject_id == subject_id,
                Edge.predicate == predicate,
                Edge.target_kind == kind,
            )
        )
        return result.scalar_one()

    async def targets_of(self, subject_id: UUID, predicate: Predicate, kind: TargetKind) -> list[UUID]:
        """Targets the subject holds an edge on, oldest edge first."""
        result = await self.db.execute(
            select(Edge.target_id)
            .where(
                Edge.subject_id == subject_id,
                Edge.predicate == predicate,
                Edge.target_kind == kind,
            )
            .order_by(Edge.created_at, Edge.id)
        )
        return list(result.scalars().all())

    async def _find(self, subject_id: UUID, predicate: Predicate, target: Target) -> Optional[Edge]:
        result = await self.db.execute(
            select(Edge).where(
                Edge.subject_id == subject_id,
                Edge.predicate == predicate,
                Edge.target_kind == target.kind,
                Edge.target_id == target.id,
            )
        )
        return result.scalar_one_or_none()
