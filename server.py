import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import config
from models import PostCreate, PostOut, PostUpdate, serialize_post
from store import PostStore, StoreError, open_store

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> PostStore:
    return request.app.state.store


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    error = errors[0]
    if error.get("type") == "json_invalid":
        return "Invalid JSON in request body"
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if error.get("type") == "missing":
        if not field:
            return "Missing request body"
        return f"Missing `{field}` in request body"
    if not field:
        return f"Invalid request body: {error.get('msg')}"
    return f"Invalid `{field}`: {error.get('msg')}"


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = _describe_validation_error(exc)
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse({"detail": message}, status_code=400)


async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


# --- REST API ---
@router.get("/posts", response_model=list[PostOut])
def api_list_posts(store: PostStore = Depends(get_store)):
    return [serialize_post(post) for post in store.find_all()]

@router.get("/posts/{post_id}", response_model=PostOut)
def api_get_post(post_id: str, store: PostStore = Depends(get_store)):
    post = store.find_by_id(post_id)
    if post is None:
        raise HTTPException(status_code=404, detail="post not found")
    return serialize_post(post)

@router.post("/posts", response_model=PostOut, status_code=201)
def api_create_post(body: PostCreate, store: PostStore = Depends(get_store)):
    post = store.insert(body)
    logger.info("Created post %s", post.id)
    return serialize_post(post)

@router.put("/posts/{post_id}", status_code=204, response_class=Response)
def api_update_post(post_id: str, body: PostUpdate, store: PostStore = Depends(get_store)):
    if body.id is not None and body.id != post_id:
        raise HTTPException(
            status_code=400,
            detail=f"Request path id ({post_id}) and request body id ({body.id}) must match",
        )
    if store.update_by_id(post_id, body) is None:
        raise HTTPException(status_code=404, detail="post not found")
    logger.info("Updated post %s", post_id)
    return Response(status_code=204)

@router.delete("/posts/{post_id}", status_code=204, response_class=Response)
def api_delete_post(post_id: str, store: PostStore = Depends(get_store)):
    store.delete_by_id(post_id)
    logger.info("Deleted post %s", post_id)
    return Response(status_code=204)


def create_app(store: Optional[PostStore] = None) -> FastAPI:
    """Build the app. Without an injected store, one is opened from config
    on startup and closed again on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.store is None
        if owned:
            app.state.store = open_store(config.DATABASE_PATH, config.COLLECTION_NAME)
        try:
            yield
        finally:
            if owned:
                app.state.store.close()
                app.state.store = None
                logger.info("Database connection closed")

    app = FastAPI(title="Blog Posts API", lifespan=lifespan)
    app.state.store = store
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.include_router(router)
    return app


app = create_app()


def main():
    logging.basicConfig(level=config.LOG_LEVEL)
    logger.info("Starting Blog Posts API on port %s", config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    main()
