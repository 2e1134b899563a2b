import time

from payloads import course_payload, double_booked_payload
from scheduleboard.schemas.optimizer import OptimizerSettingsPayload


def test_detect_conflicts_returns_report(client):
    courses = [course_payload("A", "101", room="101"), course_payload("B", "202", start=500, end=550, room="101")]

    response = client.post("/api/conflicts/detect", json={"courses": courses})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["total"] == 2
    assert body["summary"]["instructor"] == 1
    assert body["summary"]["room"] == 1
    assert body["summary"]["affectedCRNs"] == ["A", "B"]
    conflict = body["conflicts"][0]
    assert conflict["overlapStart"] == 500
    assert conflict["overlapEnd"] == 530


def test_detect_conflicts_hides_stacked_pairs_unless_asked(client):
    courses = [course_payload("1", "427"), course_payload("2", "527")]

    hidden = client.post("/api/conflicts/detect", json={"courses": courses})
    shown = client.post(
        "/api/conflicts/detect",
        json={"courses": courses, "options": {"hideStackedCourses": False, "hideLabCorequisites": True}},
    )

    assert hidden.json()["summary"]["total"] == 0
    assert shown.json()["summary"]["total"] == 2


def test_mark_conflicts_sets_flag(client):
    courses = [
        course_payload("A", "101"),
        course_payload("B", "202", room="202"),
        course_payload("C", "303", email="jones@ewu.edu", room="303"),
    ]

    response = client.post("/api/conflicts/mark", json={"courses": courses})

    assert response.status_code == 200
    flags = {item["crn"]: item["hasConflicts"] for item in response.json()}
    assert flags == {"A": True, "B": True, "C": False}


def test_invalid_course_is_rejected(client):
    bad = course_payload("A")
    bad["meetings"][0]["startMinutes"] = -5
    response = client.post("/api/conflicts/detect", json={"courses": [bad]})
    assert response.status_code == 422


def test_groups_endpoint_merges_quartet(client):
    courses = [
        course_payload("1", "477"),
        course_payload("2", "477L"),
        course_payload("3", "577"),
        course_payload("4", "577L"),
        course_payload("5", "300", start=600, end=650),
    ]

    response = client.post("/api/groups", json={"courses": courses})

    assert response.status_code == 200
    groups = response.json()
    assert [group["allCRNs"] for group in groups] == [["1", "2", "3", "4"], ["5"]]
    assert groups[0]["displayCode"] == "477/477L/577/577L"
    assert groups[0]["hasStackedPair"] is True
    assert groups[1]["isStandalone"] is True


def test_stacked_endpoint(client):
    courses = [course_payload("1", "427"), course_payload("2", "527"), course_payload("3", "303")]

    response = client.post("/api/stacked", json={"courses": courses})

    assert response.status_code == 200
    pairs = response.json()
    assert len(pairs) == 1
    assert pairs[0]["baseCourse"]["crn"] == "1"
    assert pairs[0]["stackedCourse"]["crn"] == "2"


def test_analysis_endpoint_hides_stacked_versions(client):
    courses = [course_payload("1", "427"), course_payload("2", "527")]

    response = client.post("/api/analysis", json={"courses": courses})

    assert response.status_code == 200
    body = response.json()
    assert [item["crn"] for item in body["courses"]] == ["1"]
    assert body["conflicts"] == []
    assert len(body["stackedPairs"]) == 1


def test_optimizer_run_returns_ranked_permutations(client):
    response = client.post("/api/optimizer/run", json={"courses": double_booked_payload()})

    assert response.status_code == 200
    body = response.json()
    assert body["originalConflictCount"] == 1
    assert body["permutations"]
    best = body["permutations"][0]
    assert best["conflictCount"] == 0
    assert best["changes"][0]["from"] == "Mon/Wed 8:00-8:50"
    assert body["stopReason"] is None


def test_optimizer_rejects_unknown_locked_crns(client):
    response = client.post(
        "/api/optimizer/run",
        json={"courses": double_booked_payload(), "options": {"lockedCRNs": ["ZZZ"]}},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["details"] == {"unknown_crns": ["ZZZ"]}


def test_optimizer_job_lifecycle(client):
    submitted = client.post("/api/optimizer/jobs", json={"courses": double_booked_payload()})
    assert submitted.status_code == 202
    job_id = submitted.json()["id"]

    deadline = time.monotonic() + 10
    body = submitted.json()
    while body["status"] in {"pending", "running"} and time.monotonic() < deadline:
        time.sleep(0.01)
        body = client.get(f"/api/optimizer/jobs/{job_id}").json()

    assert body["status"] == "completed"
    assert body["progress"] == 100
    assert body["permutations"]

    cancelled = client.delete(f"/api/optimizer/jobs/{job_id}")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "completed"


def test_unknown_optimizer_job_is_404(client):
    response = client.get("/api/optimizer/jobs/does-not-exist")
    assert response.status_code == 404
    assert response.json()["details"]["resource_type"] == "Optimizer job"


def test_oversized_request_is_rejected(client):
    response = client.post(
        "/api/conflicts/detect",
        content=b"{}",
        headers={"content-type": "application/json", "content-length": "999999999"},
    )
    assert response.status_code == 413
    assert "max_bytes" in response.json()["details"]


def test_optimizer_schema_documents_unapplied_flags():
    schema = OptimizerSettingsPayload.model_json_schema(by_alias=True)

    for flag in ("allowInstructorChange", "allowCampusChange"):
        assert "not applied" in schema["properties"][flag]["description"]
