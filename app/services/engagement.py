"""Engagement ledger: like/unlike posts, save/unsave recipes.

Each ledger pairs a relation table carrying a UNIQUE (user, target)
constraint with an integer counter column on the target row. The relation
write and the counter update always share one transaction.

Races are arbitrated by the database, never by a prior existence query:
    - add:    INSERT the relation; a unique violation means ALREADY_EXISTS and
              the counter is left alone.
    - remove: DELETE the relation; zero rows deleted means NOT_FOUND.
Counters move with ``UPDATE ... SET n = n + 1`` so concurrent writers on the
same target never lose an increment.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import TransientStoreFailure, UnknownTarget
from app.models.post import Post, PostLike
from app.models.recipe import Recipe, SavedRecipe

logger = logging.getLogger(__name__)


class AddOutcome(str, Enum):
    ADDED = "added"
    ALREADY_EXISTS = "already_exists"


class RemoveOutcome(str, Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class LedgerResult:
    outcome: AddOutcome | RemoveOutcome
    # Counter value read after the transaction finished
    count: int


class EngagementLedger:
    def __init__(self, name: str, target_kind: str, relation, target, target_fk: str, counter: str):
        self.name = name
        self.target_kind = target_kind
        self.relation = relation
        self.target = target
        self.target_fk = target_fk
        self.counter = counter

    @property
    def _counter_col(self):
        return getattr(self.target, self.counter)

    @property
    def _fk_col(self):
        return getattr(self.relation, self.target_fk)

    def add_relation(self, db: Session, user_id: int, target_id: int) -> LedgerResult:
        self._require_target(db, target_id)
        try:
            db.add(self.relation(user_id=user_id, **{self.target_fk: target_id}))
            try:
                db.flush()
            except IntegrityError:
                db.rollback()
                # A foreign key violation also lands here when the target was
                # deleted after the lookup above.
                self._require_target(db, target_id)
                self._log("already exists", user_id, target_id)
                return LedgerResult(AddOutcome.ALREADY_EXISTS, self.count(db, target_id))

            self._bump(db, target_id, +1)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise TransientStoreFailure(f"Could not record {self.name}") from e

        self._log("added", user_id, target_id)
        return LedgerResult(AddOutcome.ADDED, self.count(db, target_id))

    def remove_relation(self, db: Session, user_id: int, target_id: int) -> LedgerResult:
        self._require_target(db, target_id)
        try:
            deleted = db.execute(
                delete(self.relation)
                .where(self.relation.user_id == user_id, self._fk_col == target_id)
                .execution_options(synchronize_session=False)
            ).rowcount
            if not deleted:
                db.rollback()
                self._log("not found", user_id, target_id)
                return LedgerResult(RemoveOutcome.NOT_FOUND, self.count(db, target_id))

            self._bump(db, target_id, -1)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise TransientStoreFailure(f"Could not remove {self.name}") from e

        self._log("removed", user_id, target_id)
        return LedgerResult(RemoveOutcome.REMOVED, self.count(db, target_id))

    def count(self, db: Session, target_id: int) -> int:
        return db.scalar(select(self._counter_col).where(self.target.id == target_id)) or 0

    def status(self, db: Session, user_id: int, target_id: int) -> tuple[bool, int]:
        """(does the user hold the relation, current count) for a read path."""
        self._require_target(db, target_id)
        return self.has_relation(db, user_id, target_id), self.count(db, target_id)

    def has_relation(self, db: Session, user_id: int, target_id: int) -> bool:
        stmt = select(self.relation.id).where(
            self.relation.user_id == user_id, self._fk_col == target_id
        )
        return db.scalar(stmt) is not None

    def _bump(self, db: Session, target_id: int, delta: int) -> None:
        stmt = update(self.target).where(self.target.id == target_id)
        if delta < 0:
            # Never below zero
            stmt = stmt.where(self._counter_col > 0)
        db.execute(
            stmt.values({self.counter: self._counter_col + delta})
            .execution_options(synchronize_session=False)
        )

    def _require_target(self, db: Session, target_id: int) -> None:
        exists = db.scalar(select(self.target.id).where(self.target.id == target_id))
        if exists is None:
            raise UnknownTarget(self.target_kind, target_id)

    def _log(self, outcome: str, user_id: int, target_id: int) -> None:
        logger.info(
            "%s %s", self.name, outcome,
            extra={"relation": self.name, "outcome": outcome, "user_id": user_id, "target_id": target_id},
        )


likes = EngagementLedger(
    name="like",
    target_kind="post",
    relation=PostLike,
    target=Post,
    target_fk="post_id",
    counter="likes_count",
)

saves = EngagementLedger(
    name="save",
    target_kind="recipe",
    relation=SavedRecipe,
    target=Recipe,
    target_fk="recipe_id",
    counter="saves_count",
)
