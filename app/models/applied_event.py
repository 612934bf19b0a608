from datetime import datetime
from sqlalchemy import String, DateTime, Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base
from app.utils.dt import utcnow

class AppliedEvent(Base):
    """Append-only log of provider events; the unique id is the replay gate."""

    __tablename__ = "applied_events"

    id: Mapped[int] = mapped_column(primary_key=True)

    # RevenueCat event.id (or a payload fingerprint when the id is missing)
    provider_event_id: Mapped[str] = mapped_column(String(128), unique=True)

    event_type: Mapped[str] = mapped_column(String(64))

    # No FK: the audit row must outlive the user
    target_user_id: Mapped[int] = mapped_column(Integer, index=True)

    # False for TEST / CANCELLATION / stale purchases
    changed: Mapped[bool] = mapped_column(Boolean, default=False)

    applied_at : Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
