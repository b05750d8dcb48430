"""Tests for the outbox event publisher."""

from datetime import date, datetime, timezone
from unittest.mock import Mock

from trialdesk.events import EventPublisher, SessionCompleted, TrialAssigned, TrialRescheduled


def test_publish_enqueues_typed_job() -> None:
    job_repo = Mock()
    job_repo.enqueue.return_value = "job-1"
    publisher = EventPublisher(job_repo)

    job_id = publisher.publish(
        TrialAssigned(
            occupant_id="student-1",
            teacher_id="t-1",
            trial_date=date(2025, 6, 21),
            trial_time="14:00",
            is_family=False,
        )
    )

    assert job_id == "job-1"
    job_repo.enqueue.assert_called_once_with(
        type="event:TrialAssigned",
        payload={
            "occupant_id": "student-1",
            "teacher_id": "t-1",
            "trial_date": "2025-06-21",
            "trial_time": "14:00",
            "is_family": False,
        },
    )


def test_datetimes_and_missing_dates_serialize() -> None:
    job_repo = Mock()
    publisher = EventPublisher(job_repo)

    publisher.publish(
        SessionCompleted(
            session_id="s-1",
            actual_minutes=30,
            notes=None,
            completed_at=datetime(2025, 6, 21, 14, 30, tzinfo=timezone.utc),
        )
    )
    publisher.publish(
        TrialRescheduled(
            entity_id="student-1",
            is_family=False,
            teacher_id="t-1",
            old_date=None,
            old_time=None,
            new_date=date(2025, 6, 22),
            new_time="15:00",
            reason="by-student-client",
            actor_id="sales-1",
        )
    )

    completed = job_repo.enqueue.call_args_list[0].kwargs["payload"]
    assert completed["completed_at"] == "2025-06-21T14:30:00+00:00"
    rescheduled = job_repo.enqueue.call_args_list[1].kwargs["payload"]
    assert rescheduled["old_date"] is None
    assert rescheduled["new_date"] == "2025-06-22"


def test_enqueue_persists_in_session(db) -> None:
    from trialdesk.repositories.job_repository import JobRepository

    repo = JobRepository(db)
    job_id = EventPublisher(repo).publish(
        TrialAssigned(
            occupant_id="family-1",
            teacher_id="t-1",
            trial_date=date(2025, 6, 21),
            trial_time="14:00",
            is_family=True,
        )
    )

    jobs = repo.list_by_type("event:TrialAssigned")
    assert [j.id for j in jobs] == [job_id]
    assert jobs[0].status == "queued"
    assert jobs[0].attempts == 0
