"""
api/routes/articles.py -- Article CRUD routes.

Routes:
  GET    /articles              -- list, newest first; ?tag= and ?date=YYYY-MM-DD filters
  POST   /articles              -- create (access guard)
  GET    /articles/{article_id} -- detail
  PUT    /articles/{article_id} -- partial update (access guard + ownership)
  POST   /articles/update/{article_id} -- same as PUT, for form clients that only send POST
  DELETE /articles/{article_id} -- delete (access guard + ownership)

Mutations run articles.permissions.load_owned_article() before touching the
store: 404 if the article does not exist, then 403 if the caller did not
create it. The store write also filters on the caller's id.
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from api.models import ArticleCreate, ArticleResponse, ArticleUpdate
from articles.models import Article
from articles.permissions import Mutation, load_owned_article, require_article
from articles.store import ArticleStore
from auth.dependencies import get_current_user
from auth.models import User
from core.errors import AppError, ErrorKind

# SQLite INTEGER range; larger ids cannot exist and are rejected as validation errors.
ArticleId = Annotated[int, Path(ge=1, le=2**63 - 1)]

# Reads are public; each mutating route declares Depends(get_current_user).
router = APIRouter()


@router.get("/articles", response_model=list[ArticleResponse])
def list_articles(
    request: Request,
    tag: Optional[str] = Query(default=None, max_length=100),
    day: Optional[date] = Query(default=None, alias="date"),
) -> list[ArticleResponse]:
    """Return all articles, newest first, optionally filtered by tag and/or creation day (UTC)."""
    store: ArticleStore = request.app.state.article_store
    return [ArticleResponse.from_article(a) for a in store.list_articles(tag=tag, day=day)]


@router.post("/articles", response_model=ArticleResponse, status_code=201)
def create_article(
    request: Request,
    body: ArticleCreate,
    current_user: User = Depends(get_current_user),
) -> ArticleResponse:
    """Publish a new article owned by the caller."""
    store: ArticleStore = request.app.state.article_store
    article = Article(
        title=body.title,
        content=body.content,
        author=body.author or current_user.username or "Anonymous",
        tags=body.tags,
        created_by=current_user.id,
    )
    article_id = store.create_article(article)
    return ArticleResponse.from_article(require_article(store, article_id))


@router.get("/articles/{article_id}", response_model=ArticleResponse)
def get_article(request: Request, article_id: ArticleId) -> ArticleResponse:
    store: ArticleStore = request.app.state.article_store
    return ArticleResponse.from_article(require_article(store, article_id))


@router.put("/articles/{article_id}", response_model=ArticleResponse)
@router.post("/articles/update/{article_id}", response_model=ArticleResponse)
def update_article(
    request: Request,
    article_id: ArticleId,
    body: ArticleUpdate,
    current_user: User = Depends(get_current_user),
) -> ArticleResponse:
    """Change title, content, author and/or tags. Fields left out are kept."""
    store: ArticleStore = request.app.state.article_store
    load_owned_article(store, article_id, current_user, Mutation.EDIT)

    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "author" in changes and not changes["author"]:
        changes["author"] = current_user.username
    if changes and not store.update_article(article_id, current_user.id, **changes):
        # Deleted between the ownership check and the write.
        raise AppError(ErrorKind.NOT_FOUND, "Article not found.")
    return ArticleResponse.from_article(require_article(store, article_id))


@router.delete("/articles/{article_id}", status_code=204)
def delete_article(
    request: Request,
    article_id: ArticleId,
    current_user: User = Depends(get_current_user),
) -> Response:
    store: ArticleStore = request.app.state.article_store
    load_owned_article(store, article_id, current_user, Mutation.DELETE)
    if not store.delete_article(article_id, current_user.id):
        raise AppError(ErrorKind.NOT_FOUND, "Article not found.")
    return Response(status_code=204)
