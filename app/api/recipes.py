from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.engagement import SaveOut
from app.services.engagement import AddOutcome, RemoveOutcome, saves

router = APIRouter(prefix="/recipes", tags=["recipes"])

# Whether the current user saved a recipe, with the current count
@router.get("/{recipe_id}/save", response_model=SaveOut)
def get_save(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    is_saved, count = saves.status(db, user.id, recipe_id)
    return SaveOut(recipe_id=recipe_id, saves_count=count, is_saved=is_saved)

# Save a recipe for the current user
@router.post("/{recipe_id}/save", response_model=SaveOut)
def save_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = saves.add_relation(db, user.id, recipe_id)
    if result.outcome is AddOutcome.ALREADY_EXISTS:
        raise HTTPException(status_code=409, detail="Recipe already saved")
    return SaveOut(recipe_id=recipe_id, saves_count=result.count, is_saved=True)

# Remove a recipe from the current user's saved recipes
@router.delete("/{recipe_id}/save", response_model=SaveOut)
def unsave_recipe(
    recipe_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = saves.remove_relation(db, user.id, recipe_id)
    if result.outcome is RemoveOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Recipe not found in saved recipes")
    return SaveOut(recipe_id=recipe_id, saves_count=result.count, is_saved=False)
