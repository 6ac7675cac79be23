"""Tests for servdesk.services.visibility: query predicate and row check agree."""

from kb_fixtures import StoreTestCase

from servdesk.models import Article, ArticleStatus
from servdesk.services.visibility import is_visible, visible_predicate


class TestVisibility(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.published = self.add_article("Published", self.supervisor, status=ArticleStatus.PUBLISHED)
        self.archived = self.add_article("Archived", self.supervisor, status=ArticleStatus.ARCHIVED)
        self.staff_draft = self.add_article("Staff Draft", self.supervisor)
        self.own_draft = self.add_article("Own Draft", self.agent)
        self.own_archived = self.add_article("Own Archived", self.agent, status=ArticleStatus.ARCHIVED)

    def visible_ids(self, who, status_filter=None) -> set[int]:
        rows = self.db.query(Article.id).filter(visible_predicate(who.roles, who.id, status_filter))
        return {row.id for row in rows}

    def test_agent_sees_published_and_own_drafts_only(self) -> None:
        self.assertEqual(self.visible_ids(self.agent), {self.published.id, self.own_draft.id})

    def test_other_agent_does_not_see_someone_elses_draft(self) -> None:
        self.assertEqual(self.visible_ids(self.other_agent), {self.published.id})

    def test_staff_see_everything(self) -> None:
        everything = {a.id for a in self.db.query(Article).all()}
        for who in (self.supervisor, self.admin, self.super_admin):
            self.assertEqual(self.visible_ids(who), everything)

    def test_status_filter_intersects_agent_rule(self) -> None:
        self.assertEqual(self.visible_ids(self.agent, ArticleStatus.ARCHIVED), set())
        self.assertEqual(self.visible_ids(self.agent, ArticleStatus.DRAFT), {self.own_draft.id})
        self.assertEqual(self.visible_ids(self.agent, ArticleStatus.PUBLISHED), {self.published.id})

    def test_status_filter_narrows_staff_view(self) -> None:
        self.assertEqual(
            self.visible_ids(self.admin, ArticleStatus.ARCHIVED),
            {self.archived.id, self.own_archived.id},
        )

    def test_row_check_matches_predicate(self) -> None:
        for who in (self.agent, self.other_agent, self.supervisor, self.admin):
            expected = self.visible_ids(who)
            actual = {
                a.id for a in self.db.query(Article).all() if is_visible(a, who.roles, who.id)
            }
            self.assertEqual(actual, expected, who.username)
