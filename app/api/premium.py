from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.premium_package import PremiumPackage
from app.models.user import User
from app.schemas.premium import EntitlementOut, PackageOut
from app.services.entitlement_sync import load_state
from app.services.entitlements import is_entitled
from app.utils.dt import utcnow

router = APIRouter(prefix="/premium", tags=["premium"])

# Active packages shown on the paywall
@router.get("/packages", response_model=list[PackageOut])
def list_packages(db: Session = Depends(get_db)):
    return (db.query(PremiumPackage)
            .filter(PremiumPackage.is_active.is_(True))
            .order_by(PremiumPackage.id)
            .all())

# Current user's entitlement (read only, writes go through the webhook)
@router.get("/me", response_model=EntitlementOut)
def my_entitlement(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    state, row = load_state(db, user.id)
    return EntitlementOut(
        user_id=user.id,
        status=state.status.value,
        is_premium=state.is_premium,
        premium_until=state.premium_until,
        package=PackageOut.model_validate(row.package) if row and row.package else None,
        is_active_now=is_entitled(state, utcnow()),
    )
