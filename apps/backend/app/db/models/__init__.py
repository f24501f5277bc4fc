from app.db.models.refresh_token import RefreshToken

__all__ = [
    "RefreshToken",
]
