"""Authentication schemas for token handling."""

from datetime import datetime

from pydantic import BaseModel


class TokenData(BaseModel):
    """Claims extracted from an access token.

    Attributes:
        user_id: The authenticated user's ID (``sub`` claim)
        role: The user's portal role (``role`` claim)
        exp: Token expiration time
        type: Token type, always "access" for API calls
    """

    user_id: int
    role: str
    exp: datetime
    type: str = "access"
