"""Unit tests for TaskService and CommentService."""

from types import SimpleNamespace

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ludicboard.errors import NotFoundError, PermissionDenied, ValidationError
from ludicboard.models.attachment import Attachment
from ludicboard.models.comment import Comment
from ludicboard.models.project import ProjectRole
from ludicboard.models.task import Task, TaskStatus
from ludicboard.models.task_assignment import task_assignments
from ludicboard.schemas.task import AttachmentCreate, CommentCreate, TaskCreate, TaskUpdate
from ludicboard.services.permissions import task_policy
from ludicboard.services.task_service import CommentService, TaskService
from tests.utils import add_membership, fail_on_delete, make_project, make_task, make_user


@pytest.fixture
def board(db_session: Session) -> SimpleNamespace:
    """Project with an owner, two members and a viewer."""
    owner = make_user(db_session, "owner")
    bob = make_user(db_session, "bob")
    carol = make_user(db_session, "carol")
    viewer = make_user(db_session, "viewer")
    project = make_project(db_session, owner)
    add_membership(db_session, project, bob, ProjectRole.MEMBER)
    add_membership(db_session, project, carol, ProjectRole.MEMBER)
    add_membership(db_session, project, viewer, ProjectRole.VIEWER)
    return SimpleNamespace(owner=owner, bob=bob, carol=carol, viewer=viewer, project=project)


class TestCreateTask:
    """Task creation."""

    def test_assignees_round_trip(self, db_session: Session, board: SimpleNamespace) -> None:
        data = TaskCreate(
            title="Write docs",
            project_id=board.project.id,
            assigned_user_ids=[board.carol.user_id, board.bob.user_id],
        )

        task = TaskService.create_task(db_session, board.owner.user_id, data)

        assert task.author_user_id == board.owner.user_id
        assert set(task.assigned_user_ids) == {board.bob.user_id, board.carol.user_id}
        assert task.assigned_user_id == min(board.bob.user_id, board.carol.user_id)
        assert task.status is TaskStatus.TO_DO

    def test_legacy_single_assignee_is_merged(self, db_session: Session, board: SimpleNamespace) -> None:
        data = TaskCreate(
            title="Legacy",
            project_id=board.project.id,
            assigned_user_id=board.bob.user_id,
            assigned_user_ids=[board.bob.user_id, board.carol.user_id],
        )

        task = TaskService.create_task(db_session, board.owner.user_id, data)

        assert task.assigned_user_ids == sorted([board.bob.user_id, board.carol.user_id])
        rows = db_session.execute(
            select(func.count()).select_from(task_assignments).where(task_assignments.c.task_id == task.id)
        ).scalar_one()
        assert rows == 2

    def test_tags_are_stored_comma_separated(self, db_session: Session, board: SimpleNamespace) -> None:
        data = TaskCreate(title="Tagged", project_id=board.project.id, tags="ui, backend ,")

        task = TaskService.create_task(db_session, board.owner.user_id, data)

        assert task.tags == "ui,backend"

    def test_unknown_assignee(self, db_session: Session, board: SimpleNamespace) -> None:
        data = TaskCreate(title="Ghost", project_id=board.project.id, assigned_user_ids=[999])

        with pytest.raises(ValidationError, match="999"):
            TaskService.create_task(db_session, board.owner.user_id, data)

    def test_viewer_cannot_create(self, db_session: Session, board: SimpleNamespace) -> None:
        data = TaskCreate(title="Nope", project_id=board.project.id)

        with pytest.raises(PermissionDenied):
            TaskService.create_task(db_session, board.viewer.user_id, data)

    def test_cannot_create_on_behalf_of_someone_else(
        self, db_session: Session, board: SimpleNamespace
    ) -> None:
        data = TaskCreate(title="Forged", project_id=board.project.id, author_user_id=board.owner.user_id)

        with pytest.raises(PermissionDenied):
            TaskService.create_task(db_session, board.bob.user_id, data)

    def test_missing_project(self, db_session: Session, board: SimpleNamespace) -> None:
        with pytest.raises(NotFoundError):
            TaskService.create_task(db_session, board.owner.user_id, TaskCreate(title="x", project_id=999))


class TestUpdateTask:
    """Full edits, status changes and deletion follow the task tier."""

    def test_author_can_edit(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])

        updated = TaskService.update_task(
            db_session,
            board.bob.user_id,
            task.id,
            TaskUpdate(title="Renamed", points=3, assigned_user_ids=[board.owner.user_id]),
        )

        assert updated.title == "Renamed"
        assert updated.points == 3
        assert updated.assigned_user_ids == [board.owner.user_id]

    def test_explicit_null_title_is_ignored(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, title="Keep me")

        updated = TaskService.update_task(
            db_session, board.bob.user_id, task.id, TaskUpdate(title=None, description="d")
        )

        assert updated.title == "Keep me"
        assert updated.description == "d"

    def test_clearing_assignees(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])

        updated = TaskService.update_task(
            db_session, board.bob.user_id, task.id, TaskUpdate(assigned_user_ids=[])
        )

        assert updated.assigned_user_ids == []
        assert updated.assigned_user_id is None

    @pytest.mark.parametrize("who", ["carol", "viewer", "owner"])
    def test_non_author_cannot_edit(self, db_session: Session, board: SimpleNamespace, who: str) -> None:
        """Assignees, viewers and even the project owner get 403 on full edits."""
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])

        with pytest.raises(PermissionDenied):
            TaskService.update_task(
                db_session, getattr(board, who).user_id, task.id, TaskUpdate(title="Hijack")
            )

    def test_assignee_can_change_status(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])

        updated = TaskService.update_task_status(
            db_session, board.carol.user_id, task.id, TaskStatus.WORK_IN_PROGRESS
        )

        assert updated.status is TaskStatus.WORK_IN_PROGRESS

    def test_viewer_cannot_change_status(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)

        with pytest.raises(PermissionDenied):
            TaskService.update_task_status(db_session, board.viewer.user_id, task.id, TaskStatus.COMPLETED)

    def test_delete_removes_dependents(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])
        db_session.add_all(
            [
                Comment(text="hello", task_id=task.id, user_id=board.carol.user_id),
                Attachment(file_url="https://files/a.pdf", task_id=task.id, uploaded_by_id=board.bob.user_id),
            ]
        )
        db_session.commit()
        task_id = task.id

        TaskService.delete_task(db_session, board.bob.user_id, task_id)

        assert db_session.get(Task, task_id) is None
        assert db_session.query(Comment).filter_by(task_id=task_id).count() == 0
        assert db_session.query(Attachment).filter_by(task_id=task_id).count() == 0
        remaining = db_session.execute(select(func.count()).select_from(task_assignments)).scalar_one()
        assert remaining == 0

    def test_failed_delete_rolls_back(
        self, db_session: Session, board: SimpleNamespace, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])
        db_session.add(Comment(text="hello", task_id=task.id, user_id=board.carol.user_id))
        db_session.commit()
        task_id = task.id
        fail_on_delete(monkeypatch, db_session, nth=4)

        with pytest.raises(OperationalError):
            TaskService.delete_task(db_session, board.bob.user_id, task_id)

        assert db_session.get(Task, task_id) is not None
        assert db_session.query(Comment).filter_by(task_id=task_id).count() == 1
        remaining = db_session.execute(select(func.count()).select_from(task_assignments)).scalar_one()
        assert remaining == 1

    def test_assignee_cannot_delete(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])

        with pytest.raises(PermissionDenied):
            TaskService.delete_task(db_session, board.carol.user_id, task.id)

    def test_assignee_can_attach(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob, assignees=[board.carol])

        attachment = TaskService.add_attachment(
            db_session,
            board.carol.user_id,
            task.id,
            AttachmentCreate(file_url="https://files/brief.pdf", file_name="brief.pdf"),
        )

        assert attachment.uploaded_by_id == board.carol.user_id
        assert attachment.task_id == task.id

    def test_viewer_cannot_attach(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)

        with pytest.raises(PermissionDenied):
            TaskService.add_attachment(
                db_session, board.viewer.user_id, task.id, AttachmentCreate(file_url="https://files/x.png")
            )

    @pytest.mark.parametrize(
        ("operation", "check"),
        [
            (lambda db, uid, tid: TaskService.update_task(db, uid, tid, TaskUpdate(title="x")), "can_edit"),
            (
                lambda db, uid, tid: TaskService.update_task_status(db, uid, tid, TaskStatus.COMPLETED),
                "can_change_status",
            ),
            (lambda db, uid, tid: TaskService.delete_task(db, uid, tid), "can_delete"),
            (
                lambda db, uid, tid: TaskService.add_attachment(db, uid, tid, AttachmentCreate(file_url="u")),
                "can_attach",
            ),
        ],
    )
    def test_writes_ask_the_task_policy(
        self, db_session: Session, board: SimpleNamespace, monkeypatch: pytest.MonkeyPatch, operation, check: str
    ) -> None:
        """A policy refusal blocks even the task author."""
        task = make_task(db_session, board.project, board.bob)
        calls = []

        def refuse(actor, checked_task, db):
            calls.append((actor.user_id, checked_task.id))
            return False

        monkeypatch.setattr(task_policy, check, refuse)

        with pytest.raises(PermissionDenied):
            operation(db_session, board.bob.user_id, task.id)

        assert calls == [(board.bob.user_id, task.id)]


class TestTaskQueries:
    """Listing tasks by project and by user."""

    def test_project_tasks_visible_to_viewer(self, db_session: Session, board: SimpleNamespace) -> None:
        first = make_task(db_session, board.project, board.bob, title="First")
        second = make_task(db_session, board.project, board.owner, title="Second")

        tasks = TaskService.get_project_tasks(db_session, board.viewer.user_id, board.project.id)

        assert [t.id for t in tasks] == [first.id, second.id]

    def test_project_tasks_hidden_from_strangers(self, db_session: Session, board: SimpleNamespace) -> None:
        stranger = make_user(db_session, "stranger")

        with pytest.raises(PermissionDenied):
            TaskService.get_project_tasks(db_session, stranger.user_id, board.project.id)

    def test_user_tasks(self, db_session: Session, board: SimpleNamespace) -> None:
        authored = make_task(db_session, board.project, board.bob, title="Authored")
        assigned = make_task(db_session, board.project, board.owner, title="Assigned", assignees=[board.bob])
        make_task(db_session, board.project, board.owner, title="Unrelated")
        hidden_project = make_project(db_session, board.bob, name="Private")
        make_task(db_session, hidden_project, board.bob, title="Hidden")

        tasks = TaskService.get_user_tasks(db_session, board.viewer.user_id, board.bob.user_id)

        assert [t.id for t in tasks] == [authored.id, assigned.id]

    def test_user_tasks_include_own_tasks_outside_membership(
        self, db_session: Session, board: SimpleNamespace
    ) -> None:
        """An assignee who is not a project member still sees the task in their own listing."""
        outsider = make_user(db_session, "outsider")
        assigned = make_task(db_session, board.project, board.owner, title="Outsourced", assignees=[outsider])
        make_task(db_session, board.project, board.owner, title="Not theirs")

        assert TaskService.get_task(db_session, outsider.user_id, assigned.id).id == assigned.id
        tasks = TaskService.get_user_tasks(db_session, outsider.user_id, outsider.user_id)

        assert [t.id for t in tasks] == [assigned.id]

    def test_user_tasks_hidden_from_unrelated_caller(self, db_session: Session, board: SimpleNamespace) -> None:
        outsider = make_user(db_session, "outsider")
        stranger = make_user(db_session, "stranger")
        make_task(db_session, board.project, board.owner, title="Outsourced", assignees=[outsider])

        assert TaskService.get_user_tasks(db_session, stranger.user_id, outsider.user_id) == []


class TestComments:
    """Comment creation and author-only edits."""

    def test_any_member_can_comment(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)

        comment = CommentService.create_comment(
            db_session, board.viewer.user_id, task.id, CommentCreate(text="  Looks good  ")
        )

        assert comment.text == "Looks good"
        assert comment.user_id == board.viewer.user_id

    def test_empty_comment(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)

        with pytest.raises(ValidationError):
            CommentService.create_comment(db_session, board.bob.user_id, task.id, CommentCreate(text="   "))

    def test_comment_as_someone_else(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)

        with pytest.raises(PermissionDenied):
            CommentService.create_comment(
                db_session, board.bob.user_id, task.id, CommentCreate(text="hi", user_id=board.carol.user_id)
            )

    def test_stranger_cannot_comment(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)
        stranger = make_user(db_session, "stranger")

        with pytest.raises(PermissionDenied):
            CommentService.create_comment(db_session, stranger.user_id, task.id, CommentCreate(text="hi"))

    def test_only_author_edits(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)
        comment = CommentService.create_comment(db_session, board.carol.user_id, task.id, CommentCreate(text="v1"))

        with pytest.raises(PermissionDenied):
            CommentService.edit_comment(db_session, board.bob, comment.id, "task author edit")
        with pytest.raises(PermissionDenied):
            CommentService.edit_comment(db_session, board.owner, comment.id, "owner edit")

        edited = CommentService.edit_comment(db_session, board.carol, comment.id, "v2")
        assert edited.text == "v2"

    def test_only_author_deletes(self, db_session: Session, board: SimpleNamespace) -> None:
        task = make_task(db_session, board.project, board.bob)
        comment = CommentService.create_comment(db_session, board.carol.user_id, task.id, CommentCreate(text="bye"))
        comment_id = comment.id

        with pytest.raises(PermissionDenied):
            CommentService.delete_comment(db_session, board.owner, comment_id)

        deleted = CommentService.delete_comment(db_session, board.carol, comment_id)

        assert deleted.id == comment_id
        assert db_session.get(Comment, comment_id) is None

    def test_missing_comment(self, db_session: Session, board: SimpleNamespace) -> None:
        with pytest.raises(NotFoundError):
            CommentService.edit_comment(db_session, board.bob, 4242, "text")
