"""Best-effort view counting for published articles, run after the response is sent."""

import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from servdesk.core.database import SessionLocal
from servdesk.models import Article

logger = logging.getLogger(__name__)


def increment_view_count(article_id: int) -> None:
    """
    Add one to the article's view_count in its own session and transaction.

    Failures are logged and dropped: a lost increment is acceptable, and the read
    that triggered it has already been answered.
    """
    db = SessionLocal()
    try:
        db.execute(
            update(Article)
            .where(Article.id == article_id)
            .values(view_count=Article.view_count + 1)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("View count increment failed for article_id=%s", article_id)
    finally:
        db.close()
