"""
Pydantic schemas for User endpoints.

The password is accepted on create/update and NEVER included in any
response schema.
"""

from pydantic import BaseModel, EmailStr, Field


class UserCreateRequest(BaseModel):
    """Request body for POST /users."""
    username: str = Field(min_length=1, max_length=150)
    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdateRequest(BaseModel):
    """Request body for PUT /users/{id} (all fields optional)."""
    username: str | None = Field(None, min_length=1, max_length=150)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=1)


class UserResponse(BaseModel):
    """Public representation of a User."""
    id: int
    username: str
    email: str

    model_config = {"from_attributes": True}
