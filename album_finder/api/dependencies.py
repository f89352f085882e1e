# ============================================================================
# FILE: album_finder/api/dependencies.py
# ============================================================================
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from album_finder.core.exceptions import UnauthorizedError
from album_finder.core.security import TokenManager
from album_finder.schemas.user import TokenData
from album_finder.services.album_service import AlbumService
from album_finder.services.user_service import UserService
from typing import Optional

bearer_scheme = HTTPBearer(auto_error=False)

def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service

def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.user_service.tokens

def get_album_service(request: Request) -> AlbumService:
    return request.app.state.album_service

def require_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenManager = Depends(get_token_manager),
) -> TokenData:
    """
    Require a valid bearer token (raises 401 otherwise)
    Use this dependency for protected endpoints; the decoded identity is
    returned without a database lookup.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Access token required")
    return tokens.decode_access_token(credentials.credentials)
