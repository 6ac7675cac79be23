"""Unit tests for servdesk.services.lifecycle: transition gates and published_at rules."""

import unittest
from datetime import datetime, timezone

from servdesk.models.article import ArticleStatus
from servdesk.models.user import Role
from servdesk.services.lifecycle import (
    apply_transition,
    check_transition,
    required_roles_for_transition,
    validate_article_fields,
)
from servdesk.services.policy import ADMIN_ROLES, SUPERVISOR_ROLES

DRAFT = ArticleStatus.DRAFT
PUBLISHED = ArticleStatus.PUBLISHED
ARCHIVED = ArticleStatus.ARCHIVED

T1 = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
T2 = datetime(2025, 2, 1, 12, 0, tzinfo=timezone.utc)


class TestRequiredRoles(unittest.TestCase):
    def test_unchanged_status_needs_supervisor(self) -> None:
        for status in ArticleStatus:
            self.assertEqual(required_roles_for_transition(status, status), SUPERVISOR_ROLES)

    def test_every_status_change_needs_admin(self) -> None:
        for current in ArticleStatus:
            for target in ArticleStatus:
                if current != target:
                    self.assertEqual(
                        required_roles_for_transition(current, target),
                        ADMIN_ROLES,
                        f"{current} -> {target}",
                    )


class TestCheckTransition(unittest.TestCase):
    def test_supervisor_cannot_publish(self) -> None:
        decision = check_transition(frozenset({Role.SUPERVISOR}), DRAFT, PUBLISHED)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.required_roles, ADMIN_ROLES)

    def test_supervisor_may_edit_draft(self) -> None:
        self.assertTrue(check_transition(frozenset({Role.SUPERVISOR}), DRAFT, DRAFT).allowed)

    def test_admin_may_publish_and_archive(self) -> None:
        admin = frozenset({Role.ADMIN})
        self.assertTrue(check_transition(admin, DRAFT, PUBLISHED).allowed)
        self.assertTrue(check_transition(admin, PUBLISHED, ARCHIVED).allowed)
        self.assertTrue(check_transition(admin, ARCHIVED, DRAFT).allowed)

    def test_agent_may_do_nothing(self) -> None:
        agent = frozenset({Role.AGENT})
        for current in ArticleStatus:
            for target in ArticleStatus:
                self.assertFalse(check_transition(agent, current, target).allowed)

    def test_mixed_role_set_uses_union(self) -> None:
        self.assertTrue(
            check_transition(frozenset({Role.AGENT, Role.SUPER_ADMIN}), DRAFT, PUBLISHED).allowed
        )


class TestApplyTransition(unittest.TestCase):
    def test_publishing_stamps_now(self) -> None:
        result = apply_transition(DRAFT, PUBLISHED, None, T1)
        self.assertEqual(result.status, PUBLISHED)
        self.assertEqual(result.published_at, T1)

    def test_republishing_from_archive_restamps(self) -> None:
        self.assertEqual(apply_transition(ARCHIVED, PUBLISHED, T1, T2).published_at, T2)

    def test_archiving_preserves_published_at(self) -> None:
        result = apply_transition(PUBLISHED, ARCHIVED, T1, T2)
        self.assertEqual(result.status, ARCHIVED)
        self.assertEqual(result.published_at, T1)

    def test_archived_back_to_draft_clears_published_at(self) -> None:
        result = apply_transition(ARCHIVED, DRAFT, T1, T2)
        self.assertEqual(result.status, DRAFT)
        self.assertIsNone(result.published_at)

    def test_unpublishing_to_draft_keeps_published_at(self) -> None:
        self.assertEqual(apply_transition(PUBLISHED, DRAFT, T1, T2).published_at, T1)

    def test_staying_published_keeps_original_stamp(self) -> None:
        self.assertEqual(apply_transition(PUBLISHED, PUBLISHED, T1, T2).published_at, T1)


class TestValidateArticleFields(unittest.TestCase):
    def test_valid(self) -> None:
        self.assertEqual(validate_article_fields("Title", "Body", None), {})

    def test_blank_title_and_content(self) -> None:
        errors = validate_article_fields("   ", "", None)
        self.assertIn("title", errors)
        self.assertIn("content", errors)

    def test_whitespace_content_counts_as_non_empty(self) -> None:
        self.assertEqual(validate_article_fields("Title", "  \n", None), {})
        self.assertIn("content", validate_article_fields("Title", "", None))

    def test_length_limits(self) -> None:
        errors = validate_article_fields("x" * 201, "Body", "y" * 501)
        self.assertIn("title", errors)
        self.assertIn("excerpt", errors)
        self.assertEqual(validate_article_fields("x" * 200, "Body", "y" * 500), {})

    def test_partial_skips_missing_fields(self) -> None:
        self.assertEqual(validate_article_fields(None, None, None, partial=True), {})
        self.assertIn("title", validate_article_fields("", None, None, partial=True))
