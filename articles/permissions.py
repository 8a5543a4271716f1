"""
articles/permissions.py -- Ownership authorization for article mutations.

Two separate steps, always in this order:
  1. require_article()  -- the article must exist, else 404 not_found.
  2. require_owner()    -- the caller must be its creator, else 403.

Keeping them apart means a missing article is always reported as 404, for
every caller, and an ownership comparison never runs against an article that
does not exist. load_owned_article() runs both for the update and delete
routes; nothing is written until it returns.
"""

from __future__ import annotations

from enum import Enum

from articles.models import Article
from articles.store import ArticleStore
from auth.models import User
from core.errors import AppError, ErrorKind


class Mutation(str, Enum):
    EDIT = "edit"
    DELETE = "delete"


def require_article(store: ArticleStore, article_id: int) -> Article:
    article = store.get_article(article_id)
    if article is None:
        raise AppError(ErrorKind.NOT_FOUND, "Article not found.")
    return article


def require_owner(article: Article, user: User, action: Mutation) -> None:
    """Raise 403 unless user created the article. Compares ids only."""
    if article.created_by != user.id:
        raise AppError(ErrorKind.UNAUTHORIZED_OWNERSHIP, f"Unauthorized. You can only {action.value} your own articles.")


def load_owned_article(store: ArticleStore, article_id: int, user: User, action: Mutation) -> Article:
    article = require_article(store, article_id)
    require_owner(article, user, action)
    return article
