from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- User ---

class UserBase(BaseModel):
    username: str = Field(max_length=50)
    email: str = Field(max_length=255)


class UserCreate(UserBase):
    pass


class UserResponse(UserBase):
    id: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuthorResponse(BaseModel):
    """Public face of a comment author: never more than the username."""
    id: str
    username: str


# --- Category ---

class CategoryCreate(BaseModel):
    name: str = Field(max_length=100)


class CategoryResponse(BaseModel):
    id: str
    name: str
    model_config = ConfigDict(from_attributes=True)


# --- Post ---
# Text fields are optional at the schema level so the service can report
# every missing or blank field in a single ValidationError.

class PostCreate(BaseModel):
    title: str | None = None
    content: str | None = None
    category: str | None = None


class PostUpdate(BaseModel):
    """Partial update: a field left as None is not touched."""
    title: str | None = None
    content: str | None = None
    category: str | None = None

    def supplied(self) -> dict[str, str]:
        return {k: v for k, v in self.model_dump().items() if v is not None}


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    category_id: str
    category: CategoryResponse | None = None
    featured_image: str = ""
    created_at: datetime
    updated_at: datetime | None = None


# --- Comment ---

class CommentCreate(BaseModel):
    content: str | None = None


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user: AuthorResponse | None = None
    content: str
    created_at: datetime


# --- Common ---

class PaginatedResponse(BaseModel):
    items: list[PostResponse]
    total: int
    page: int
    limit: int
    pages: int


class MessageResponse(BaseModel):
    message: str
