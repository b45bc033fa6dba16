"""API route handlers for PasteForge"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from pasteforge.app import PasteForgeApp
from pasteforge.models.paste import Paste, PasteListing
from pasteforge.models.user import Identity, PublicProfile, UserRecord
from pasteforge.utils.exceptions import PasteForgeError
from pasteforge.utils.logger import get_logger

from .auth_deps import get_app, get_optional_identity, get_session_token, require_identity
from .models import (
    AuthResponse,
    CreatePasteResponse,
    CredentialsRequest,
    PasteContentRequest,
    PasteListResponse,
    PasteResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    SuccessResponse,
    UserSummary,
)

logger = get_logger(__name__)


router = APIRouter(tags=["api"])
auth_router = APIRouter(prefix="/auth", tags=["auth"])
pastes_router = APIRouter(prefix="/pastes", tags=["pastes"])
profile_router = APIRouter(prefix="/profile", tags=["profile"])
user_router = APIRouter(prefix="/user", tags=["user"])


def _http_error(e: Exception, action: str) -> HTTPException:
    """
    Translate a failure into an HTTPException.

    Client errors keep their message; store failures and anything
    unexpected are logged and collapsed to a generic 500.
    """
    if isinstance(e, PasteForgeError) and e.status_code < 500:
        return HTTPException(status_code=e.status_code, detail=e.message)
    logger.exception(f"Failed to {action}", error=str(e))
    return HTTPException(status_code=500, detail=f"Failed to {action}")


def _normalize_username(username: str) -> str:
    """Profile URLs may carry a leading '@'"""
    return username[1:] if username.startswith("@") else username


def _paste_body(paste: Paste) -> dict:
    return {
        "id": paste.id,
        "content": paste.content,
        "createdAt": paste.created_at,
        "updatedAt": paste.updated_at,
        "userId": paste.user_id,
        "username": paste.username,
    }


def _listing_body(listing: PasteListing) -> dict:
    return {
        "pastes": [_paste_body(p) for p in listing.pastes],
        "skipped": listing.skipped,
    }


def _profile_body(profile: PublicProfile) -> dict:
    return {"profile": profile.model_dump(by_alias=True)}


def _session_response(forge: PasteForgeApp, user: UserRecord) -> JSONResponse:
    """Response carrying the user summary and a fresh session cookie"""
    token = forge.codec.issue(user.id, user.username)
    response = JSONResponse(
        AuthResponse(user=UserSummary(id=user.id, username=user.username)).model_dump()
    )
    response.set_cookie(
        key=forge.settings.auth.cookie_name,
        value=token,
        max_age=forge.session_max_age,
        httponly=True,
        secure=forge.settings.app.is_production,
        samesite="lax",
        path="/",
    )
    return response


@router.get("/health")
async def health_check():
    """Health check endpoint for deployment platforms"""
    return {
        "status": "healthy",
        "service": "pasteforge",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# --- Authentication ---

@auth_router.post("/login", response_model=AuthResponse)
async def login(credentials: CredentialsRequest, forge: PasteForgeApp = Depends(get_app)):
    """Login with username and password"""
    try:
        user = await run_in_threadpool(
            forge.users.authenticate, credentials.username, credentials.password
        )
    except Exception as e:
        raise _http_error(e, "log in")

    logger.info("Login successful", user_id=user.id, username=user.username)
    return _session_response(forge, user)


@auth_router.post("/register", response_model=AuthResponse)
async def register(credentials: CredentialsRequest, forge: PasteForgeApp = Depends(get_app)):
    """Create an account and log it in"""
    try:
        user = await run_in_threadpool(
            forge.users.register, credentials.username, credentials.password
        )
    except Exception as e:
        raise _http_error(e, "register")

    return _session_response(forge, user)


@auth_router.post("/logout")
async def logout(
    forge: PasteForgeApp = Depends(get_app),
    token: Optional[str] = Depends(get_session_token),
):
    """Clear the session cookie. Tokens are stateless, so nothing else is revoked."""
    if token:
        logger.info("Session cookie cleared")
    response = JSONResponse({"success": True})
    response.delete_cookie(key=forge.settings.auth.cookie_name, path="/")
    return response


@auth_router.get("/me", response_model=UserSummary)
async def get_current_user_info(identity: Identity = Depends(require_identity)):
    return {"id": identity.user_id, "username": identity.username}


# --- Pastes ---

@pastes_router.post("", response_model=CreatePasteResponse)
async def create_paste(
    body: PasteContentRequest,
    forge: PasteForgeApp = Depends(get_app),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    """Create a paste; logged-in callers become its owner"""
    try:
        paste_id = await run_in_threadpool(forge.pastes.create_paste, body.content, identity)
    except Exception as e:
        raise _http_error(e, "create paste")
    return {"pasteId": paste_id}


@pastes_router.get("/{paste_id}", response_model=PasteResponse)
async def get_paste(paste_id: str, forge: PasteForgeApp = Depends(get_app)):
    try:
        paste = await run_in_threadpool(forge.pastes.get_paste, paste_id)
    except Exception as e:
        raise _http_error(e, "load paste")
    return {"paste": _paste_body(paste)}


@pastes_router.get("/{paste_id}/raw", response_class=PlainTextResponse)
async def get_raw_paste(paste_id: str, forge: PasteForgeApp = Depends(get_app)):
    """Paste content as text/plain"""
    try:
        paste = await run_in_threadpool(forge.pastes.get_paste, paste_id)
    except Exception as e:
        raise _http_error(e, "load paste")
    return PlainTextResponse(paste.content)


@pastes_router.put("/{paste_id}", response_model=SuccessResponse)
async def update_paste(
    paste_id: str,
    body: PasteContentRequest,
    forge: PasteForgeApp = Depends(get_app),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    """Replace the content of a paste owned by the caller"""
    try:
        await run_in_threadpool(forge.pastes.update_paste, paste_id, body.content, identity)
    except Exception as e:
        raise _http_error(e, "update paste")
    return {"success": True}


@pastes_router.delete("/{paste_id}", response_model=SuccessResponse)
async def delete_paste(
    paste_id: str,
    forge: PasteForgeApp = Depends(get_app),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    try:
        await run_in_threadpool(forge.pastes.delete_paste, paste_id, identity)
    except Exception as e:
        raise _http_error(e, "delete paste")
    return {"success": True}


# --- Profiles ---

@profile_router.get("/{username}", response_model=ProfileResponse)
async def get_profile(username: str, forge: PasteForgeApp = Depends(get_app)):
    """Public profile of a user"""
    try:
        profile = await run_in_threadpool(forge.users.get_by_username, _normalize_username(username))
    except Exception as e:
        raise _http_error(e, "load profile")
    return _profile_body(profile)


@profile_router.put("/{username}", response_model=ProfileResponse)
async def update_profile(
    username: str,
    body: ProfileUpdateRequest,
    forge: PasteForgeApp = Depends(get_app),
    identity: Optional[Identity] = Depends(get_optional_identity),
):
    """Update display name and description; only the profile's owner may"""
    try:
        profile = await run_in_threadpool(
            forge.users.update_profile,
            _normalize_username(username),
            body.name,
            body.description,
            identity,
        )
    except Exception as e:
        raise _http_error(e, "update profile")
    return _profile_body(profile)


@profile_router.get("/{username}/pastes", response_model=PasteListResponse)
async def get_profile_pastes(username: str, forge: PasteForgeApp = Depends(get_app)):
    """Every paste owned by a user, newest first"""
    try:
        listing = await run_in_threadpool(
            forge.pastes.list_pastes_by_username, _normalize_username(username)
        )
    except Exception as e:
        raise _http_error(e, "load pastes")
    return _listing_body(listing)


@user_router.get("/pastes", response_model=PasteListResponse)
async def get_my_pastes(
    forge: PasteForgeApp = Depends(get_app),
    identity: Identity = Depends(require_identity),
):
    """The logged-in user's own pastes (dashboard)"""
    try:
        listing = await run_in_threadpool(forge.pastes.list_pastes_by_user, identity.user_id)
    except Exception as e:
        raise _http_error(e, "load pastes")
    return _listing_body(listing)
