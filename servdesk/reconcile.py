"""
CLI entrypoint for the article-count repair job. Run from cron, e.g.:

  python -m servdesk.reconcile

Or nightly: 0 3 * * * cd /path/to/servdesk && .venv/bin/python -m servdesk.reconcile

Every write path already reconciles the counters it touches; this job recomputes
all of them in case a counter drifted through a manual data fix.
"""

import logging
import sys

from servdesk.core.database import SessionLocal, atomic
from servdesk.services.counters import reconcile_all

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Recompute article_count for every category and tag."""
    db = SessionLocal()
    try:
        with atomic(db):
            categories_changed, tags_changed = reconcile_all(db)
        logger.info(
            "Reconcile completed: categories_changed=%s tags_changed=%s",
            categories_changed,
            tags_changed,
        )
        return 0
    except Exception as e:
        logger.exception("Reconcile job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
