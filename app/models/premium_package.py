from sqlalchemy import String, Integer, Numeric, Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base

class PremiumPackage(Base):
    __tablename__ = "premium_packages"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(120))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Informational only, the store decides what is charged
    price_monthly: Mapped[float | None] = mapped_column(Numeric(10, 2), nullable=True)
    price_yearly: Mapped[float | None] = mapped_column(Numeric(10, 2), nullable=True)
    trial_days: Mapped[int] = mapped_column(Integer, default=0)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    # Store product identifier sent by RevenueCat as event.product_id,
    # e.g. "premium_monthly" or "com.app.premium.annual"
    store_product_id: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
