# backend/app.py

import argparse
import logging
from typing import List

import uvicorn
from fastapi import FastAPI, Request, Depends, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker
from starlette.middleware.sessions import SessionMiddleware

from .collection import BookmarkCollection
from .config import APP_TITLE, BASE_URL, HTTPS_ONLY, LOG_LEVEL, OAUTH_REDIRECT_URI, SECRET_KEY
from .db import get_session_factory, init_db
from .schemas import BookmarkCreate, BookmarkRecord, SessionUser
from .security import (
    OAuthSessionProvider, SessionProvider, SessionState, oauth, resolve_session,
)
from .store import BookmarkStore, SqlBookmarkStore
from .utils import clean
from .views import render_page

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# FastAPI app
# ------------------------------------------------------------------------------
app = FastAPI(title=APP_TITLE)
app.add_middleware(SessionMiddleware, secret_key=SECRET_KEY, same_site="lax", https_only=HTTPS_ONLY)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[BASE_URL, "http://localhost:8000", "http://127.0.0.1:8000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    init_db()
    logger.info("database ready")

# ------------------------------------------------------------------------------
# Dependencies
# ------------------------------------------------------------------------------
def get_store(session_factory: sessionmaker = Depends(get_session_factory)) -> BookmarkStore:
    return SqlBookmarkStore(session_factory)

def get_session_provider(
    request: Request,
    session_factory: sessionmaker = Depends(get_session_factory),
) -> SessionProvider:
    return OAuthSessionProvider(request, oauth, session_factory)

def get_session_state(provider: SessionProvider = Depends(get_session_provider)) -> SessionState:
    return resolve_session(provider)

def get_current_user(state: SessionState = Depends(get_session_state)) -> SessionUser:
    if not state.is_authenticated:
        raise HTTPException(401, "not authenticated")
    return state.user

def get_collection(
    store: BookmarkStore = Depends(get_store),
    user: SessionUser = Depends(get_current_user),
) -> BookmarkCollection:
    return BookmarkCollection(store, user)

def _redirect_uri_from_request(request: Request) -> str:
    return OAUTH_REDIRECT_URI or str(request.url_for("auth_callback"))

# ------------------------------------------------------------------------------
# Page
# ------------------------------------------------------------------------------
@app.get("/", response_class=HTMLResponse)
async def index(
    state: SessionState = Depends(get_session_state),
    store: BookmarkStore = Depends(get_store),
):
    bookmarks: List[BookmarkRecord] = []
    if state.is_authenticated:
        collection = BookmarkCollection(store, state.user)
        bookmarks = await collection.load()
    return HTMLResponse(render_page(state, bookmarks))

# ------------------------------------------------------------------------------
# Auth routes
# ------------------------------------------------------------------------------
@app.get("/auth/login")
async def auth_login(request: Request, provider: SessionProvider = Depends(get_session_provider)):
    return await provider.sign_in("google", _redirect_uri_from_request(request))

@app.get("/auth/callback")
async def auth_callback(provider: OAuthSessionProvider = Depends(get_session_provider)):
    await provider.complete_sign_in("google")
    return RedirectResponse("/", status_code=302)

@app.post("/auth/logout")
async def auth_logout(provider: SessionProvider = Depends(get_session_provider)):
    provider.sign_out()
    return JSONResponse({"ok": True})

# ------------------------------------------------------------------------------
# API
# ------------------------------------------------------------------------------
@app.get("/health")
def health():
    return {"ok": True}

@app.get("/api/me")
async def api_me(user: SessionUser = Depends(get_current_user)):
    return {"user": user.model_dump()}

@app.get("/api/bookmarks")
async def api_list_bookmarks(collection: BookmarkCollection = Depends(get_collection)):
    bookmarks = await collection.load()
    return {"bookmarks": [b.model_dump(mode="json") for b in bookmarks]}

@app.post("/api/bookmarks", status_code=201)
async def api_create_bookmark(data: BookmarkCreate, collection: BookmarkCollection = Depends(get_collection)):
    if not clean(data.title) or not clean(data.url):
        raise HTTPException(400, "title and url required")
    record = await collection.create(data.title, data.url)
    if record is None:
        raise HTTPException(502, "bookmark could not be saved")
    return record.model_dump(mode="json")

@app.delete("/api/bookmarks/{bookmark_id}")
async def api_delete_bookmark(bookmark_id: str, collection: BookmarkCollection = Depends(get_collection)):
    if not await collection.delete(bookmark_id):
        raise HTTPException(502, "bookmark could not be deleted")
    return {"ok": True}

# Health
@app.get("/healthz")
async def healthz():
    return PlainTextResponse("ok")


def main(argv=None):
    parser = argparse.ArgumentParser(description=APP_TITLE)
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to run the server on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args(argv)
    uvicorn.run("backend.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
