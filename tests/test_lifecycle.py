"""Tests for the application state machine and its notifications."""
from datetime import datetime, timezone

import pytest

from app.core.exceptions import Conflict, NotFound, ValidationError
from app.models.application import Application, Rejection
from app.models.interview import Interview
from app.models.job import Job
from app.models.user import User
from app.services.lifecycle import ApplicationLifecycle, format_interview_date


def add_user(db, name, user_type):
    user = User(name=name, email=f"{name.lower()}@example.com", password_hash="x", user_type=user_type)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def lifecycle(dispatcher):
    return ApplicationLifecycle(dispatcher)


@pytest.fixture
def employer(db):
    return add_user(db, "Employer", "employer")


@pytest.fixture
def other_employer(db):
    return add_user(db, "Rival", "employer")


@pytest.fixture
def seeker(db):
    return add_user(db, "Seeker", "job_seeker")


@pytest.fixture
def job(db, employer):
    job = Job(title="Backend Engineer", description="d", requirements="r",
              location="Remote", employer_id=employer.id)
    db.add(job)
    db.commit()
    return job


@pytest.fixture
def application(db, lifecycle, job, seeker):
    return lifecycle.apply(db, job.id, seeker.id)


class TestApply:

    def test_apply_creates_pending_application(self, db, lifecycle, job, seeker):
        application = lifecycle.apply(db, job.id, seeker.id)

        assert application.status == "pending"
        assert application.job_id == job.id
        assert application.user_id == seeker.id
        assert application.applied_at is not None

    def test_second_apply_conflicts_without_new_row(self, db, lifecycle, job, seeker):
        lifecycle.apply(db, job.id, seeker.id)

        with pytest.raises(Conflict):
            lifecycle.apply(db, job.id, seeker.id)

        assert db.query(Application).filter(
            Application.job_id == job.id, Application.user_id == seeker.id
        ).count() == 1

    def test_apply_to_missing_job(self, db, lifecycle, seeker):
        with pytest.raises(NotFound):
            lifecycle.apply(db, 4242, seeker.id)

    def test_employer_is_notified(self, db, lifecycle, job, seeker, employer, connect):
        employer_conn = connect(employer.id)

        application = lifecycle.apply(db, job.id, seeker.id)

        events = employer_conn.events("new_application")
        assert events == [{
            "message": "Seeker has applied for your job: Backend Engineer",
            "jobId": job.id,
            "applicationId": application.id,
            "applicantId": seeker.id,
        }]


class TestReject:

    def test_reject_records_reason_and_notifies_once(
        self, db, lifecycle, application, employer, seeker, connect
    ):
        seeker_conn = connect(seeker.id)

        lifecycle.reject(db, application.id, employer.id, "not a fit")

        db.expire_all()
        assert db.get(Application, application.id).status == "rejected"
        rejections = db.query(Rejection).filter(Rejection.application_id == application.id).all()
        assert len(rejections) == 1
        assert rejections[0].reason == "not a fit"
        assert len(seeker_conn.messages) == 1
        assert seeker_conn.messages[0]["event"] == "application_rejected"
        assert "Backend Engineer" in seeker_conn.messages[0]["data"]["message"]

    @pytest.mark.parametrize("reason", [None, "", "  "])
    def test_missing_reason_uses_placeholder(self, db, lifecycle, application, employer, reason):
        lifecycle.reject(db, application.id, employer.id, reason)

        rejection = db.query(Rejection).filter(Rejection.application_id == application.id).one()
        assert rejection.reason == "No reason provided"

    def test_non_owner_gets_not_found(self, db, lifecycle, application, other_employer, seeker, connect):
        seeker_conn = connect(seeker.id)

        with pytest.raises(NotFound):
            lifecycle.reject(db, application.id, other_employer.id, "nope")

        db.expire_all()
        assert db.get(Application, application.id).status == "pending"
        assert db.query(Rejection).count() == 0
        assert seeker_conn.messages == []

    def test_unknown_application(self, db, lifecycle, employer):
        with pytest.raises(NotFound):
            lifecycle.reject(db, 999, employer.id)

    def test_rejecting_twice_conflicts(self, db, lifecycle, application, employer, seeker, connect):
        lifecycle.reject(db, application.id, employer.id, "first")
        seeker_conn = connect(seeker.id)

        with pytest.raises(Conflict):
            lifecycle.reject(db, application.id, employer.id, "second")

        reasons = [r.reason for r in db.query(Rejection).all()]
        assert reasons == ["first"]
        assert seeker_conn.messages == []


class TestScheduleInterview:

    def test_schedule_records_interview_and_notifies(
        self, db, lifecycle, application, employer, seeker, connect
    ):
        seeker_conn = connect(seeker.id)
        when = datetime(2030, 5, 1, 10, 30)

        lifecycle.schedule_interview(db, application.id, employer.id, when)

        db.expire_all()
        assert db.get(Application, application.id).status == "interview_scheduled"
        interviews = db.query(Interview).filter(Interview.application_id == application.id).all()
        assert len(interviews) == 1
        assert interviews[0].interview_date == when
        events = seeker_conn.events("interview_scheduled")
        assert len(events) == 1
        assert "Backend Engineer" in events[0]["message"]
        assert events[0]["interviewDate"] == when.isoformat()
        assert events[0]["message"].endswith("scheduled on 2030-05-01 10:30.")
        assert "T10:30" not in events[0]["message"]

    def test_interview_date_is_shown_without_iso_separator(self):
        assert format_interview_date(datetime(2025, 3, 10, 10, 0)) == "2025-03-10 10:00"
        assert format_interview_date(
            datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)
        ) == "2025-03-10 10:00 UTC"

    def test_date_is_required(self, db, lifecycle, application, employer):
        with pytest.raises(ValidationError):
            lifecycle.schedule_interview(db, application.id, employer.id, None)

        assert db.query(Interview).count() == 0

    def test_non_owner_gets_not_found(self, db, lifecycle, application, other_employer):
        with pytest.raises(NotFound):
            lifecycle.schedule_interview(db, application.id, other_employer.id, datetime(2030, 1, 1))

        assert db.query(Interview).count() == 0

    def test_rejected_application_cannot_be_scheduled(self, db, lifecycle, application, employer):
        lifecycle.reject(db, application.id, employer.id, "filled")

        with pytest.raises(Conflict):
            lifecycle.schedule_interview(db, application.id, employer.id, datetime(2030, 1, 1))

        db.expire_all()
        assert db.get(Application, application.id).status == "rejected"
        assert db.query(Interview).count() == 0

    def test_scheduled_application_cannot_be_rejected(self, db, lifecycle, application, employer):
        lifecycle.schedule_interview(db, application.id, employer.id, datetime(2030, 1, 1))

        with pytest.raises(Conflict):
            lifecycle.reject(db, application.id, employer.id, "changed our mind")

        assert db.query(Rejection).count() == 0


class TestConcurrentDecisions:

    def test_only_one_of_two_racing_decisions_wins(
        self, session_factory, lifecycle, application, employer
    ):
        # Both sessions pass the ownership lookup before either updates
        first, second = session_factory(), session_factory()
        try:
            lifecycle._owned_application(first, application.id, employer.id)
            lifecycle._owned_application(second, application.id, employer.id)

            lifecycle.reject(first, application.id, employer.id, "first wins")
            with pytest.raises(Conflict):
                lifecycle.schedule_interview(second, application.id, employer.id, datetime(2030, 1, 1))
        finally:
            first.close()
            second.close()


class TestEmployerApplications:

    def test_lists_only_own_applications(self, db, lifecycle, job, seeker, employer, other_employer):
        lifecycle.apply(db, job.id, seeker.id)
        rival_job = Job(title="Frontend", description="d", requirements="r",
                        location="l", employer_id=other_employer.id)
        db.add(rival_job)
        db.commit()
        lifecycle.apply(db, rival_job.id, seeker.id)

        rows = lifecycle.list_employer_applications(db, employer.id)

        assert len(rows) == 1
        assert rows[0]["job_title"] == "Backend Engineer"
        assert rows[0]["applicant_name"] == "Seeker"
        assert rows[0]["status"] == "pending"
