from sqlalchemy.orm import Session
from app.db.session import SessionLocal, init_db
from app.models.premium_package import PremiumPackage

PACKAGES = [
    {"name": "Premium Monthly", "store_product_id": "premium_monthly",
     "description": "All recipes and diet plans, billed monthly",
     "price_monthly": 4.99, "price_yearly": None, "trial_days": 7},

    {"name": "Premium Yearly", "store_product_id": "premium_yearly",
     "description": "All recipes and diet plans, billed yearly",
     "price_monthly": None, "price_yearly": 39.99, "trial_days": 7},

    {"name": "Premium Lifetime", "store_product_id": "premium_lifetime",
     "description": "One-time purchase, never expires",
     "price_monthly": None, "price_yearly": None, "trial_days": 0},
]

def upsert_package(db: Session, data: dict) -> PremiumPackage:
    package = db.query(PremiumPackage).filter(
        PremiumPackage.store_product_id == data["store_product_id"]
    ).first()
    if package:
        for k, v in data.items():
            setattr(package, k, v)
        return package

    package = PremiumPackage(**data)
    db.add(package)
    return package

def main():
    init_db()
    db = SessionLocal()
    try:
        for data in PACKAGES:
            upsert_package(db, data)
        db.commit()
        print("Seeded packages:", [p["store_product_id"] for p in PACKAGES])
    finally:
        db.close()

if __name__ == "__main__":
    main()
