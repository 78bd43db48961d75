import pytest
from fastapi import HTTPException

from taskapp.modules.tasks.schemas import AssignmentCreate, GeneratedTaskAssign, GeneratedTaskCreate
from taskapp.modules.tasks.service import ProofUpload, list_my_tasks


def _accept(generated, difficulty="medium", description="Read one chapter"):
    return generated.accept_for_self(
        "alice", GeneratedTaskCreate(task_description=description, category="education", difficulty=difficulty)
    )


class TestAcceptAndAssign:
    def test_self_accepted_task(self, generated):
        task = _accept(generated)
        assert task.points == 50
        assert task.status == "pending"
        assert task.assigned_by == "application"
        assert task.user_id == "alice"
        assert task.kind == "generated"

    def test_unknown_difficulty_is_kept_and_worth_nothing(self, generated, db, clock):
        task = _accept(generated, difficulty="Extreme")
        assert task.difficulty == "extreme"
        assert task.points == 0

        completed = generated.complete(task.id, "alice")

        assert completed.points == 0
        assert db.row("profiles", user_id="alice")["completed_challenges"] == 1

    def test_difficulty_defaults_to_medium(self):
        assert GeneratedTaskCreate(task_description="Stretch").difficulty == "medium"

    def test_assign_to_friend_notifies_them(self, generated, db):
        task = generated.assign_to_friend(
            "alice",
            GeneratedTaskAssign(task_description="Plant something", difficulty="easy", friend_id="bob"),
        )
        assert task.user_id == "bob"
        assert task.assigned_by == "alice"
        assert task.points == 25
        note = db.row("notifications", user_id="bob")
        assert note["message"] == 'You have been assigned a new generated task: "Plant something" by your friend.'

    def test_cannot_assign_to_self(self, generated):
        with pytest.raises(HTTPException) as exc:
            generated.assign_to_friend(
                "alice", GeneratedTaskAssign(task_description="x", friend_id="alice")
            )
        assert exc.value.status_code == 400


class TestCompletion:
    def test_medium_task_completed_after_ten_minutes(self, generated, db, clock):
        task = _accept(generated)
        clock.advance(minutes=10)

        completed = generated.complete(task.id, "alice")

        assert completed.status == "completed"
        assert completed.duration == "10 minutes"
        assert completed.points == 50
        alice = db.row("profiles", user_id="alice")
        assert alice["score"] == 50
        assert alice["completed_challenges"] == 1

    def test_proof_earns_no_bonus(self, generated, clock):
        task = _accept(generated, difficulty="hard")
        proof = ProofUpload(filename="page.png", content=b"png", content_type="image/png")

        completed = generated.complete(task.id, "alice", comment="done", proof=proof)

        assert completed.points == 75
        assert completed.proof_url.endswith(".png")
        assert completed.comment == "done"

    def test_recompleting_stays_completed_without_new_credit(self, generated, db, clock):
        task = _accept(generated)
        clock.advance(minutes=10)
        generated.complete(task.id, "alice", comment="first")
        clock.advance(minutes=5)

        again = generated.complete(task.id, "alice", comment="second")

        assert again.status == "completed"
        assert again.duration == "15 minutes"
        assert again.comment == "second"
        assert db.row("profiles", user_id="alice")["score"] == 50

    def test_only_owner_completes(self, generated):
        task = _accept(generated)
        with pytest.raises(HTTPException) as exc:
            generated.complete(task.id, "bob")
        assert exc.value.status_code == 403

    def test_failed_credit_rolls_back(self, generated, db):
        task = _accept(generated)
        db.fail("profiles", "update")

        with pytest.raises(HTTPException):
            generated.complete(task.id, "alice", comment="done")

        row = db.row("GeneratedTasks", id=task.id)
        assert row["status"] == "pending"
        assert row["comment"] == ""

    def test_lost_score_race_is_retried(self, generated, db):
        task = _accept(generated)

        def concurrent_credit():
            profile = db.row("profiles", user_id="alice")
            profile["score"] += 25
            profile["completed_challenges"] += 1

        db.before("profiles", "update", concurrent_credit)
        generated.complete(task.id, "alice")

        alice = db.row("profiles", user_id="alice")
        assert alice["score"] == 75
        assert alice["completed_challenges"] == 2


class TestDeleteAndList:
    def test_delete_pending_task(self, generated, db):
        task = _accept(generated)
        assert generated.delete(task.id, "alice") is True
        assert db.rows("GeneratedTasks") == []

    def test_completed_task_cannot_be_deleted(self, generated):
        task = _accept(generated)
        generated.complete(task.id, "alice")
        with pytest.raises(HTTPException) as exc:
            generated.delete(task.id, "alice")
        assert exc.value.status_code == 409

    def test_my_tasks_mixes_both_families_newest_first(self, generated, assignments, clock):
        older = _accept(generated, description="older")
        clock.advance(minutes=1)
        newer = assignments.create_assignment(
            "bob", AssignmentCreate(assigned_to="alice", task_description="newer", difficulty="easy")
        )

        tasks = list_my_tasks(assignments, generated, "alice")

        assert [(t.kind, t.id) for t in tasks] == [("assignment", newer.id), ("generated", older.id)]
