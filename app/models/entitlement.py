from datetime import datetime
from sqlalchemy import ForeignKey, Enum, DateTime, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base
from app.utils.dt import utcnow

class UserEntitlement(Base):
    __tablename__ = "user_entitlements"

    id: Mapped[int] = mapped_column(primary_key=True)

    # One entitlement row per user; a user without a row is "free"
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True)

    # Written only by app.services.entitlements (state machine output)
    status: Mapped[str] = mapped_column(
        Enum("free", "active", "expired", name="entitlement_status"),
        default="free",
    )
    is_premium: Mapped[bool] = mapped_column(Boolean, default=False)

    package_id: Mapped[int | None] = mapped_column(
        ForeignKey("premium_packages.id", ondelete="SET NULL"), nullable=True
    )

    # None while active means lifetime access
    premium_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Provider timestamp of the newest event that changed this row
    last_event_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at : Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    updated_at : Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="entitlement")
    package = relationship("PremiumPackage")

    __table_args__ = (
        Index("ix_user_entitlements_status_until", "status", "premium_until"),
    )
