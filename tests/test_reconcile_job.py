"""Tests for the servdesk.reconcile CLI entrypoint."""

import unittest
from unittest.mock import MagicMock, patch

from servdesk import reconcile


class TestReconcileJob(unittest.TestCase):
    @patch("servdesk.reconcile.reconcile_all", return_value=(2, 3))
    @patch("servdesk.reconcile.SessionLocal")
    def test_success_commits_and_returns_zero(self, session_local, reconcile_all) -> None:
        session = MagicMock()
        session_local.return_value = session
        self.assertEqual(reconcile.main(), 0)
        reconcile_all.assert_called_once_with(session)
        session.commit.assert_called_once()
        session.close.assert_called_once()

    @patch("servdesk.reconcile.reconcile_all", side_effect=RuntimeError("boom"))
    @patch("servdesk.reconcile.SessionLocal")
    def test_failure_rolls_back_and_returns_one(self, session_local, _reconcile_all) -> None:
        session = MagicMock()
        session_local.return_value = session
        self.assertEqual(reconcile.main(), 1)
        session.rollback.assert_called_once()
        session.commit.assert_not_called()
        session.close.assert_called_once()
