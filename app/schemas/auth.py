from datetime import datetime
from pydantic import BaseModel, EmailStr
from typing import Optional

from app.schemas.user import UserRead


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -------------------------------------------------------------------
# REGISTER REQUEST (self sign-up, always 'requestor')
# -------------------------------------------------------------------
class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "name": "Regular User",
                    "email": "user@example.com",
                    "password": "password123",
                }
            ]
        }


# -------------------------------------------------------------------
# TOKEN + USER DETAILS (Used for login / register response)
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[datetime] = None
    user: UserRead


# -------------------------------------------------------------------
# CHANGE PASSWORD
# -------------------------------------------------------------------
class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str
