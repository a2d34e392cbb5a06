"""Tests for grade API endpoints."""

from __future__ import annotations

import typing as t

from fastapi.testclient import TestClient

from registrar.model import Actor, CourseID, Grade, GradeID, GradeStatus

Headers = t.Callable[[Actor], dict[str, str]]


class TestActorHeaders(object):
    """Identity comes from the gateway's X-Actor-* headers."""

    def test_missing_headers(self, client: TestClient) -> None:
        response = client.get("/api/grades")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    def test_malformed_actor_id(self, client: TestClient) -> None:
        response = client.get("/api/grades", headers={"X-Actor-ID": "nobody", "X-Actor-Role": "ADMIN"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid actor identity"

    def test_unknown_role(self, client: TestClient, teacher: Actor) -> None:
        response = client.get("/api/grades", headers={"X-Actor-ID": str(teacher.user_id), "X-Actor-Role": "DEAN"})

        assert response.status_code == 401

    def test_role_is_case_insensitive(self, client: TestClient, teacher: Actor) -> None:
        response = client.get(
            "/api/grades", headers={"X-Actor-ID": str(teacher.user_id), "X-Actor-Role": "teacher"}
        )

        assert response.status_code == 200


class TestCreateGrade(object):
    """Tests for POST /api/grades."""

    def test_teacher_creates(self, client: TestClient, headers: Headers, teacher: Actor, student: Actor) -> None:
        response = client.post(
            "/api/grades",
            headers=headers(teacher),
            json={
                "student_id": str(student.user_id),
                "course_id": str(CourseID()),
                "score": 88,
                "semester": "2025-fall",
                "metadata": {"component": "final"},
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["teacher_id"] == str(teacher.user_id)
        assert data["status"] == "PENDING"
        assert data["score"] == 88.0
        assert data["metadata"] == {"component": "final"}

    def test_out_of_range(self, client: TestClient, headers: Headers, teacher: Actor, student: Actor) -> None:
        response = client.post(
            "/api/grades",
            headers=headers(teacher),
            json={"student_id": str(student.user_id), "course_id": str(CourseID()), "score": 120, "semester": "s"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid grade data"

    def test_boolean_score_rejected(self, client: TestClient, headers: Headers, teacher: Actor, student: Actor) -> None:
        response = client.post(
            "/api/grades",
            headers=headers(teacher),
            json={"student_id": str(student.user_id), "course_id": str(CourseID()), "score": True, "semester": "s"},
        )

        assert response.status_code == 422
        assert client.get("/api/grades", headers=headers(teacher)).json()["total"] == 0

    def test_student_forbidden(self, client: TestClient, headers: Headers, student: Actor) -> None:
        response = client.post(
            "/api/grades",
            headers=headers(student),
            json={"student_id": str(student.user_id), "course_id": str(CourseID()), "score": 100, "semester": "s"},
        )

        assert response.status_code == 403


class TestListAndGet(object):
    """Tests for GET /api/grades and GET /api/grades/{grade_id}."""

    def test_list_is_scoped(
        self,
        client: TestClient,
        headers: Headers,
        grade_factory: t.Callable[..., Grade],
        teacher: Actor,
        other_teacher: Actor,
        student: Actor,
    ) -> None:
        mine = grade_factory()
        grade_factory(teacher_id=other_teacher.user_id)

        as_teacher = client.get("/api/grades", headers=headers(teacher)).json()
        as_student = client.get("/api/grades", headers=headers(student)).json()

        assert [g["grade_id"] for g in as_teacher["grades"]] == [str(mine.grade_id)]
        assert as_teacher["total"] == 1
        # both default grades belong to the same student
        assert as_student["total"] == 2

    def test_list_filters_by_status(
        self,
        client: TestClient,
        headers: Headers,
        grade_factory: t.Callable[..., Grade],
        teacher: Actor,
    ) -> None:
        verified = grade_factory(status=GradeStatus.Verified)
        grade_factory()

        response = client.get("/api/grades", params={"status": "VERIFIED"}, headers=headers(teacher))

        assert [g["grade_id"] for g in response.json()["grades"]] == [str(verified.grade_id)]

    def test_get(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], student: Actor
    ) -> None:
        grade = grade_factory(score=64.0)

        response = client.get(f"/api/grades/{grade.grade_id}", headers=headers(student))

        assert response.status_code == 200
        assert response.json()["score"] == 64.0

    def test_get_other_teachers_grade(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], other_teacher: Actor
    ) -> None:
        grade = grade_factory()

        response = client.get(f"/api/grades/{grade.grade_id}", headers=headers(other_teacher))

        assert response.status_code == 403
        assert response.json()["detail"] == "Not permitted"

    def test_get_missing(self, client: TestClient, headers: Headers, admin: Actor) -> None:
        response = client.get(f"/api/grades/{GradeID()}", headers=headers(admin))

        assert response.status_code == 404
        assert response.json()["detail"] == "Grade not found"


class TestEditGrade(object):
    """Tests for PATCH /api/grades/{grade_id}."""

    def test_edit_verified_grade(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(score=72.0, status=GradeStatus.Verified)

        response = client.patch(
            f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": 78, "reason": "recount"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is True
        assert data["grade"]["score"] == 78.0
        assert data["grade"]["status"] == "PENDING"
        assert data["history"]["edit_number"] == 1
        assert data["history"]["old_values"]["score"] == 72.0
        assert data["history"]["new_values"]["score"] == 78.0
        assert data["history"]["reason"] == "recount"

    def test_no_op_edit(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], admin: Actor
    ) -> None:
        grade = grade_factory(score=55.0, semester="2025-fall")

        response = client.patch(
            f"/api/grades/{grade.grade_id}", headers=headers(admin), json={"score": 55, "semester": "2025-fall"}
        )

        assert response.status_code == 200
        assert response.json()["changed"] is False
        assert response.json()["history"] is None

    def test_student_forbidden(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], student: Actor
    ) -> None:
        grade = grade_factory(score=72.0)

        response = client.patch(f"/api/grades/{grade.grade_id}", headers=headers(student), json={"score": 80})

        assert response.status_code == 403

    def test_out_of_range(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(score=60.0)

        response = client.patch(f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": 105})

        assert response.status_code == 400

    def test_boolean_score_rejected(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(score=72.0, status=GradeStatus.Verified)

        response = client.patch(f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": True})

        assert response.status_code == 422
        stored = client.get(f"/api/grades/{grade.grade_id}", headers=headers(teacher)).json()
        assert stored["score"] == 72.0
        assert stored["status"] == "VERIFIED"
        history = client.get(
            "/api/grades/history", params={"grade_id": str(grade.grade_id)}, headers=headers(teacher)
        ).json()
        assert history["total"] == 0

    def test_illegal_status_edge(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(status=GradeStatus.Rejected)

        response = client.patch(
            f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"status": "VERIFIED"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Status change not allowed"

    def test_missing_grade(self, client: TestClient, headers: Headers, admin: Actor) -> None:
        response = client.patch(f"/api/grades/{GradeID()}", headers=headers(admin), json={"score": 50})

        assert response.status_code == 404

    def test_edit_is_logged_with_client_address(
        self,
        client: TestClient,
        headers: Headers,
        grade_factory: t.Callable[..., Grade],
        teacher: Actor,
        admin: Actor,
    ) -> None:
        grade = grade_factory(score=60.0)

        client.patch(
            f"/api/grades/{grade.grade_id}",
            headers={**headers(teacher), "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
            json={"score": 65},
        )
        logs = client.get("/api/logs", params={"action": "grade.edit"}, headers=headers(admin)).json()

        [entry] = [e for e in logs["logs"] if e["user_id"] == str(teacher.user_id)]
        assert entry["ip_address"] == "203.0.113.9"
        assert "score 60 -> 65" in entry["details"]

    def test_oversized_forwarded_address_is_cut(
        self,
        client: TestClient,
        headers: Headers,
        grade_factory: t.Callable[..., Grade],
        teacher: Actor,
        admin: Actor,
    ) -> None:
        grade = grade_factory(score=60.0)
        forged = "f" * 300

        client.patch(
            f"/api/grades/{grade.grade_id}",
            headers={**headers(teacher), "X-Forwarded-For": forged},
            json={"score": 66},
        )
        logs = client.get("/api/logs", params={"action": "grade.edit"}, headers=headers(admin)).json()

        [entry] = [e for e in logs["logs"] if e["user_id"] == str(teacher.user_id)]
        assert entry["ip_address"] == forged[:64]


class TestVerifyGrade(object):
    """Tests for POST /api/grades/{grade_id}/verify."""

    def test_verify_after_edits(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(score=60.0)
        client.patch(f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": 61})

        response = client.post(
            f"/api/grades/{grade.grade_id}/verify", headers=headers(teacher), json={"status": "VERIFIED"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["grade"]["status"] == "VERIFIED"
        assert data["edit_count"] == 1
        assert data["is_after_edit"] is True

    def test_pending_is_rejected(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], admin: Actor
    ) -> None:
        grade = grade_factory(status=GradeStatus.Verified)

        response = client.post(
            f"/api/grades/{grade.grade_id}/verify", headers=headers(admin), json={"status": "PENDING"}
        )

        assert response.status_code == 400

    def test_other_teacher_forbidden(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], other_teacher: Actor
    ) -> None:
        grade = grade_factory()

        response = client.post(
            f"/api/grades/{grade.grade_id}/verify", headers=headers(other_teacher), json={"status": "VERIFIED"}
        )

        assert response.status_code == 403


class TestDeleteGrade(object):
    """Tests for DELETE /api/grades/{grade_id}."""

    def test_delete_keeps_history(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(score=60.0)
        client.patch(f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": 61})

        response = client.delete(f"/api/grades/{grade.grade_id}", headers=headers(teacher))

        assert response.status_code == 204
        assert client.get(f"/api/grades/{grade.grade_id}", headers=headers(teacher)).status_code == 404
        history = client.get(
            "/api/grades/history", params={"grade_id": str(grade.grade_id)}, headers=headers(teacher)
        ).json()
        assert history["total"] == 1

    def test_student_forbidden(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], student: Actor
    ) -> None:
        grade = grade_factory()

        response = client.delete(f"/api/grades/{grade.grade_id}", headers=headers(student))

        assert response.status_code == 403


class TestHistory(object):
    """Tests for GET /api/grades/history."""

    def test_paginated_newest_first(
        self, client: TestClient, headers: Headers, grade_factory: t.Callable[..., Grade], teacher: Actor
    ) -> None:
        grade = grade_factory(score=50.0)
        for score in (51, 52, 53):
            client.patch(f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": score})

        response = client.get(
            "/api/grades/history",
            params={"grade_id": str(grade.grade_id), "page": 1, "limit": 2},
            headers=headers(teacher),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["pages"] == 2
        assert [e["edit_number"] for e in data["entries"]] == [3, 2]
        assert data["entries"][0]["new_values"]["score"] == 53.0

    def test_other_teacher_sees_nothing(
        self,
        client: TestClient,
        headers: Headers,
        grade_factory: t.Callable[..., Grade],
        teacher: Actor,
        other_teacher: Actor,
    ) -> None:
        grade = grade_factory(score=50.0)
        client.patch(f"/api/grades/{grade.grade_id}", headers=headers(teacher), json={"score": 51})

        response = client.get(
            "/api/grades/history", params={"grade_id": str(grade.grade_id)}, headers=headers(other_teacher)
        )

        assert response.json()["total"] == 0

    def test_limit_bounds(self, client: TestClient, headers: Headers, admin: Actor) -> None:
        response = client.get("/api/grades/history", params={"limit": 500}, headers=headers(admin))

        assert response.status_code == 422
