from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class _CamelOut(BaseModel):
    # Mobile client expects camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class LikeOut(_CamelOut):
    post_id: int
    likes_count: int
    is_liked: bool

class SaveOut(_CamelOut):
    recipe_id: int
    saves_count: int
    is_saved: bool
