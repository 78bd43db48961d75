import pytest
from fastapi import HTTPException

from taskapp.modules.tasks.schemas import AssignmentCreate
from taskapp.modules.tasks.service import ProofUpload, compose_comment

PROOF = ProofUpload(filename="proof.jpg", content=b"\xff\xd8jpeg", content_type="image/jpeg")


def _assign(assignments, difficulty="hard", description="Run 5 kilometres"):
    return assignments.create_assignment(
        "alice",
        AssignmentCreate(assigned_to="bob", task_description=description, difficulty=difficulty),
    )


class TestCreateAssignment:
    def test_points_come_from_difficulty(self, assignments, db):
        assignment = _assign(assignments, difficulty="HARD")
        assert assignment.points == 75
        assert assignment.status == "pending"
        assert assignment.difficulty == "hard"
        assert assignment.kind == "assignment"

    def test_recipient_is_notified(self, assignments, db):
        _assign(assignments, difficulty="easy")
        note = db.row("notifications", user_id="bob")
        assert note["sender_id"] == "alice"
        assert note["message"] == "You have been assigned a new challenge worth 25 points!"

    def test_cannot_assign_to_self(self, assignments):
        with pytest.raises(HTTPException) as exc:
            assignments.create_assignment(
                "alice",
                AssignmentCreate(assigned_to="alice", task_description="x", difficulty="easy"),
            )
        assert exc.value.status_code == 400

    def test_unknown_recipient(self, assignments, db):
        with pytest.raises(HTTPException) as exc:
            assignments.create_assignment(
                "alice",
                AssignmentCreate(assigned_to="nobody", task_description="x", difficulty="easy"),
            )
        assert exc.value.status_code == 404
        assert db.rows("assignments") == []

    def test_unknown_difficulty_is_worth_nothing(self, assignments):
        assignment = _assign(assignments, difficulty=" Legendary ")
        assert assignment.difficulty == "legendary"
        assert assignment.points == 0
        assert assignment.status == "pending"

    def test_blank_description_is_rejected_by_schema(self):
        with pytest.raises(ValueError):
            AssignmentCreate(assigned_to="bob", task_description="   ", difficulty="easy")


class TestAssignmentScenario:
    def test_hard_assignment_with_proof_is_worth_125(self, assignments, db, clock):
        assignment = _assign(assignments)
        clock.advance(minutes=42)

        submitted = assignments.submit(assignment.id, "bob", comment="Done!", proof=PROOF)
        assert submitted.status == "submitted"
        assert submitted.points == 100
        assert submitted.duration == "42 minutes"
        assert submitted.proof_url.startswith("https://storage.test/task-proofs/bob/")
        assert submitted.proof_url.endswith(".jpg")
        review_note = db.row("notifications", user_id="alice")
        assert review_note["assignment_id"] == assignment.id
        assert "awaiting review" in review_note["message"]

        approved = assignments.approve(assignment.id, "alice", review_comment="Great pace")
        assert approved.status == "completed"
        assert approved.points == 125
        assert approved.review_comment == "Great pace"

        bob = db.row("profiles", user_id="bob")
        assert bob["score"] == 125
        assert bob["completed_challenges"] == 1
        messages = [n["message"] for n in db.rows("notifications", user_id="bob")]
        assert 'Your submission for "Run 5 kilometres" has been approved.' in messages

    def test_submission_without_proof_keeps_points(self, assignments):
        assignment = _assign(assignments, difficulty="medium")
        submitted = assignments.submit(assignment.id, "bob", comment="no photo")
        assert submitted.points == 50
        assert submitted.proof_url is None

    def test_decline_then_resubmit(self, assignments, db):
        assignment = _assign(assignments, difficulty="easy")
        assignments.submit(assignment.id, "bob", comment="first try")

        declined = assignments.decline(assignment.id, "alice", review_comment="Blurry photo")
        assert declined.status == "declined"
        assert declined.review_comment == "Blurry photo"
        assert db.row("profiles", user_id="bob")["score"] == 0

        resubmitted = assignments.submit(
            assignment.id, "bob", comment="clearer now", resubmission_reason="New photo"
        )
        assert resubmitted.status == "submitted"
        assert resubmitted.comment == "New photo. clearer now"
        assert resubmitted.review_comment is None

    def test_completed_assignment_can_be_resubmitted_and_approved_again(self, assignments, db):
        assignment = _assign(assignments, difficulty="easy")
        assignments.submit(assignment.id, "bob")
        assignments.approve(assignment.id, "alice")

        assignments.submit(assignment.id, "bob", resubmission_reason="Did it again")
        again = assignments.approve(assignment.id, "alice")

        assert again.points == 75
        bob = db.row("profiles", user_id="bob")
        assert bob["score"] == 50 + 75
        assert bob["completed_challenges"] == 2


class TestTransitionGuards:
    def test_only_assignee_submits(self, assignments):
        assignment = _assign(assignments)
        with pytest.raises(HTTPException) as exc:
            assignments.submit(assignment.id, "carol")
        assert exc.value.status_code == 403

    def test_only_assigner_reviews(self, assignments):
        assignment = _assign(assignments)
        assignments.submit(assignment.id, "bob")
        with pytest.raises(HTTPException) as exc:
            assignments.approve(assignment.id, "bob")
        assert exc.value.status_code == 403

    def test_cannot_submit_twice(self, assignments):
        assignment = _assign(assignments)
        assignments.submit(assignment.id, "bob")
        with pytest.raises(HTTPException) as exc:
            assignments.submit(assignment.id, "bob")
        assert exc.value.status_code == 409

    def test_cannot_approve_pending(self, assignments):
        assignment = _assign(assignments)
        with pytest.raises(HTTPException) as exc:
            assignments.approve(assignment.id, "alice")
        assert exc.value.status_code == 409

    def test_missing_assignment(self, assignments):
        with pytest.raises(HTTPException) as exc:
            assignments.submit(999, "bob")
        assert exc.value.status_code == 404

    def test_second_concurrent_approval_loses(self, assignments, db):
        assignment = _assign(assignments)
        assignments.submit(assignment.id, "bob")

        # another reviewer session completes it between our read and our write
        def approve_elsewhere():
            db.row("assignments", id=assignment.id)["status"] = "completed"

        db.before("assignments", "update", approve_elsewhere)
        with pytest.raises(HTTPException) as exc:
            assignments.approve(assignment.id, "alice")
        assert exc.value.status_code == 409
        assert db.row("profiles", user_id="bob")["score"] == 0


class TestFailureHandling:
    def test_failed_upload_leaves_assignment_untouched(self, assignments, db):
        assignment = _assign(assignments)
        db.storage.fail_with = Exception("bucket offline")

        with pytest.raises(HTTPException) as exc:
            assignments.submit(assignment.id, "bob", comment="done", proof=PROOF)

        assert exc.value.status_code == 502
        row = db.row("assignments", id=assignment.id)
        assert row["status"] == "pending"
        assert row["points"] == 75
        assert db.rows("notifications", user_id="alice") == []

    def test_failed_credit_rolls_back_approval(self, assignments, db):
        assignment = _assign(assignments)
        assignments.submit(assignment.id, "bob", proof=PROOF)
        db.fail("profiles", "update")

        with pytest.raises(HTTPException) as exc:
            assignments.approve(assignment.id, "alice", review_comment="ok")

        assert exc.value.status_code == 503
        assert exc.value.headers["Retry-After"] == "1"
        row = db.row("assignments", id=assignment.id)
        assert row["status"] == "submitted"
        assert row["points"] == 100
        assert db.row("profiles", user_id="bob")["score"] == 0

        db.recover("profiles", "update")
        approved = assignments.approve(assignment.id, "alice", review_comment="ok")
        assert approved.points == 125
        assert db.row("profiles", user_id="bob")["score"] == 125

    def test_null_counters_are_credited_from_zero(self, assignments, db):
        bob = db.row("profiles", user_id="bob")
        bob["score"] = None
        bob["completed_challenges"] = None
        assignment = _assign(assignments, difficulty="medium")
        assignments.submit(assignment.id, "bob")

        assignments.approve(assignment.id, "alice")

        bob = db.row("profiles", user_id="bob")
        assert bob["score"] == 75
        assert bob["completed_challenges"] == 1

    def test_unexpected_credit_error_rolls_back(self, assignments, db, monkeypatch):
        assignment = _assign(assignments)
        assignments.submit(assignment.id, "bob")

        def broken_credit(user_id, points):
            raise RuntimeError("malformed profile row")

        monkeypatch.setattr(assignments.profiles, "credit_completion", broken_credit)
        with pytest.raises(HTTPException) as exc:
            assignments.approve(assignment.id, "alice")

        assert exc.value.status_code == 503
        row = db.row("assignments", id=assignment.id)
        assert row["status"] == "submitted"
        assert row["points"] == 75

    def test_notification_failure_does_not_fail_submission(self, assignments, db):
        assignment = _assign(assignments)
        db.fail("notifications", "insert")

        submitted = assignments.submit(assignment.id, "bob")

        assert submitted.status == "submitted"
        assert db.row("assignments", id=assignment.id)["status"] == "submitted"

    def test_database_outage_is_retryable(self, assignments, db):
        db.fail("assignments", "insert")
        with pytest.raises(HTTPException) as exc:
            _assign(assignments)
        assert exc.value.status_code == 503


class TestReviewQueue:
    def test_lists_submissions_with_submitter(self, assignments):
        first = _assign(assignments, description="one")
        _assign(assignments, description="two")
        assignments.submit(first.id, "bob")

        queue = assignments.review_queue("alice")

        assert [a.id for a in queue] == [first.id]
        assert queue[0].submitter.username == "Bob"

    def test_get_assignment_attaches_reviewer(self, assignments):
        assignment = _assign(assignments)
        loaded = assignments.get_assignment(assignment.id)
        assert loaded.reviewer.username == "Alice"


class TestComposeComment:
    def test_reason_is_prepended(self):
        assert compose_comment("see photo", "Retook it", "old") == "Retook it. see photo"

    def test_reason_without_comment(self):
        assert compose_comment(None, "Retook it", "old") == "Retook it."

    def test_no_new_text_keeps_previous(self):
        assert compose_comment(None, None, "old") == "old"
