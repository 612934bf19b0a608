from app.models.user import User
from app.models.premium_package import PremiumPackage
from app.models.entitlement import UserEntitlement
from app.models.applied_event import AppliedEvent
from app.models.post import Post, PostLike
from app.models.recipe import Recipe, SavedRecipe

__all__ = [
    "User",
    "PremiumPackage",
    "UserEntitlement",
    "AppliedEvent",
    "Post",
    "PostLike",
    "Recipe",
    "SavedRecipe",
]
