from datetime import datetime
from pydantic import BaseModel

class PackageOut(BaseModel):
    id: int
    name: str
    description: str | None
    price_monthly: float | None
    price_yearly: float | None
    trial_days: int

    class Config:
        from_attributes = True

class EntitlementOut(BaseModel):
    user_id: int
    status: str
    is_premium: bool
    premium_until: datetime | None
    package: PackageOut | None
    is_active_now: bool
