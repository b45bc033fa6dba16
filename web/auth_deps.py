"""
FastAPI dependencies for the application container and the session.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from pasteforge.app import PasteForgeApp
from pasteforge.models.user import Identity


def get_app(request: Request) -> PasteForgeApp:
    """Dependency to get the PasteForge container built at startup"""
    forge = getattr(request.app.state, "forge", None)
    if forge is None:
        raise HTTPException(status_code=500, detail="Application not initialized")
    return forge


def get_session_token(request: Request, forge: PasteForgeApp = Depends(get_app)) -> Optional[str]:
    """Extract the session token from the session cookie"""
    return forge.sessions.token_from_cookies(request.cookies)


async def get_optional_identity(
    request: Request,
    forge: PasteForgeApp = Depends(get_app),
) -> Optional[Identity]:
    """The caller's identity, or None for anonymous / invalid sessions"""
    return forge.sessions.resolve(request)


async def require_identity(identity: Optional[Identity] = Depends(get_optional_identity)) -> Identity:
    """Dependency for routes that need a logged-in user"""
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return identity
