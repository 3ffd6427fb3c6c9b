from fastapi import HTTPException, Request, status

from config import settings


def normalize_user_id(user_id: str) -> str:
    return (user_id or "").strip()


def get_current_user_id(request: Request) -> str:
    """Resolve the single configured account for every request."""
    user_id = normalize_user_id(settings.DEFAULT_USER_ID)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No user configured")
    request.state.user_id = user_id
    return user_id
