from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# --- User ---

class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=1, max_length=50)
    email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    display_name: str | None = Field(None, max_length=150)
    bio: str | None = None
    model_config = ConfigDict(extra="forbid")


# --- Article ---

class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    body: str = Field(min_length=1)
    description: str | None = Field(None, max_length=500)
    user_id: int


class ArticleUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    body: str | None = Field(None, min_length=1)
    description: str | None = Field(None, max_length=500)
    model_config = ConfigDict(extra="forbid")


# --- Comment ---

class CommentCreate(BaseModel):
    article_id: int
    user_id: int
    body: str = Field(min_length=1, max_length=5000)
