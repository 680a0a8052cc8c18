"""
Tests for the audit trail.

These tests prove:
- Audit entries cannot be edited or deleted through the ORM
- History is returned oldest first and reading it changes nothing
"""
import pytest

from club_review.models.audit import AuditEntry, AuditImmutabilityError
from club_review.services.engine import ClubApplicationEngine, MemberSuspensionEngine
from club_review.services.errors import NotFoundError

from conftest import ADMIN_ID, OTHER_ADMIN_ID


@pytest.fixture
def decided_club(db_session, admins, sample_club):
    engine = ClubApplicationEngine(db_session)
    engine.reject(sample_club.id, ADMIN_ID, "Missing website")
    engine.reopen(sample_club.id, OTHER_ADMIN_ID)
    engine.approve(sample_club.id, ADMIN_ID, "Website added")
    return sample_club


class TestAuditImmutability:

    def test_audit_entry_cannot_be_modified(self, db_session, decided_club):
        """
        INVARIANT: Once written, an audit entry is never edited.
        """
        entry = db_session.query(AuditEntry).order_by(AuditEntry.id).first()
        entry.notes = "Rewritten history"

        with pytest.raises(AuditImmutabilityError, match="cannot be modified"):
            db_session.commit()
        db_session.rollback()

        db_session.refresh(entry)
        assert entry.notes == "Missing website"

    def test_audit_entry_cannot_be_deleted(self, db_session, decided_club):
        entry = db_session.query(AuditEntry).order_by(AuditEntry.id).first()
        db_session.delete(entry)

        with pytest.raises(AuditImmutabilityError, match="cannot be deleted"):
            db_session.commit()
        db_session.rollback()

        assert db_session.query(AuditEntry).count() == 3


class TestHistory:

    def test_history_is_oldest_first(self, db_session, decided_club):
        engine = ClubApplicationEngine(db_session)

        history = engine.history_for(decided_club.id)

        assert [(e.from_status, e.to_status) for e in history] == [
            ("pending", "rejected"),
            ("rejected", "pending"),
            ("pending", "approved"),
        ]
        assert [e.actor_id for e in history] == [ADMIN_ID, OTHER_ADMIN_ID, ADMIN_ID]

    def test_reading_history_twice_gives_same_result(self, db_session, decided_club):
        engine = ClubApplicationEngine(db_session)

        first = [e.id for e in engine.history_for(decided_club.id)]
        second = [e.id for e in engine.history_for(decided_club.id)]

        assert first == second
        assert db_session.query(AuditEntry).count() == 3

    def test_history_of_undecided_record_is_empty(self, db_session, sample_club):
        assert ClubApplicationEngine(db_session).history_for(sample_club.id) == []

    def test_history_of_missing_record(self, db_session):
        with pytest.raises(NotFoundError):
            ClubApplicationEngine(db_session).history_for(404)

    def test_history_is_scoped_to_one_workflow(self, db_session, decided_club, sample_member):
        """A member and a club may share an id; their histories stay apart."""
        MemberSuspensionEngine(db_session).suspend(sample_member.id, ADMIN_ID, "Spam")

        assert len(ClubApplicationEngine(db_session).history_for(decided_club.id)) == 3
        assert len(MemberSuspensionEngine(db_session).history_for(sample_member.id)) == 1
