import pytest

from models.assessments import Assessment, StudentAssessment
from models.lessons import Lesson

INVALID_LEVEL = "Le niveau doit être un entier entre 1 et 5."


def create_student(client, headers, class_id, **fields):
    r = client.post("/v1/students/", json={"class_id": class_id, "name": "Léa", **fields}, headers=headers)
    return r


# ==========================================================
# classes
# ==========================================================
def test_class_crud(client, auth_headers):
    created = client.post("/v1/classes/", json={"name": "CE1"}, headers=auth_headers)
    assert created.status_code == 201
    class_id = created.json()["data"]["id"]

    assert client.post("/v1/classes/", json={"name": "  "}, headers=auth_headers).status_code == 400

    listed = client.get("/v1/classes/", headers=auth_headers).json()["data"]
    assert [c["name"] for c in listed] == ["CE1"]

    renamed = client.put(f"/v1/classes/{class_id}", json={"name": "CE1 bis"}, headers=auth_headers)
    assert renamed.json()["data"]["name"] == "CE1 bis"

    assert client.delete(f"/v1/classes/{class_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/v1/classes/{class_id}", headers=auth_headers).status_code == 404


def test_classes_are_private(client, auth_headers, other_headers, class_id):
    r = client.get(f"/v1/classes/{class_id}", headers=other_headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Class not found or access denied"
    assert client.get("/v1/classes/", headers=other_headers).json()["data"] == []


def test_class_detail_lists_students(client, auth_headers, class_id):
    create_student(client, auth_headers, class_id, name="Zoé")
    create_student(client, auth_headers, class_id, name="Adam")

    data = client.get(f"/v1/classes/{class_id}", headers=auth_headers).json()["data"]

    assert [s["name"] for s in data["students"]] == ["Adam", "Zoé"]
    assert data["students"][0]["summaries"] == []
    assert data["students"][0]["lesson_statuses"] == []


def test_deleting_class_deletes_students(client, auth_headers, class_id):
    student_id = create_student(client, auth_headers, class_id).json()["data"]["id"]
    client.delete(f"/v1/classes/{class_id}", headers=auth_headers)
    assert client.get(f"/v1/students/{student_id}", headers=auth_headers).status_code == 404


# ==========================================================
# students
# ==========================================================
def test_create_student_default_level(client, auth_headers, class_id):
    r = create_student(client, auth_headers, class_id, age=8)
    assert r.status_code == 201
    assert r.json()["data"]["performance_level"] == 3


@pytest.mark.parametrize("level, expected", [(5, 5), ("2", 2), ("", 3), (None, 3)])
def test_create_student_with_level(client, auth_headers, class_id, level, expected):
    r = create_student(client, auth_headers, class_id, performance_level=level)
    assert r.status_code == 201
    assert r.json()["data"]["performance_level"] == expected


@pytest.mark.parametrize("level", [0, 6, 3.5, "abc", True, 10**400])
def test_create_student_invalid_level(client, auth_headers, class_id, level):
    r = create_student(client, auth_headers, class_id, performance_level=level)
    assert r.status_code == 400
    assert r.json()["message"] == INVALID_LEVEL


def test_create_student_requires_owned_class(client, auth_headers, other_headers, class_id):
    assert client.post("/v1/students/", json={"name": "X"}, headers=auth_headers).status_code == 400
    assert create_student(client, other_headers, class_id).status_code == 404


def test_update_student(client, auth_headers, class_id):
    student_id = create_student(client, auth_headers, class_id).json()["data"]["id"]

    r = client.put(f"/v1/students/{student_id}", json={"performance_level": "4", "age": 10}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["data"]["performance_level"] == 4
    assert r.json()["data"]["age"] == 10
    assert r.json()["data"]["name"] == "Léa"


def test_update_student_rejections(client, auth_headers, class_id):
    student_id = create_student(client, auth_headers, class_id).json()["data"]["id"]
    url = f"/v1/students/{student_id}"

    bad_level = client.put(url, json={"performance_level": 7}, headers=auth_headers)
    huge_level = client.put(url, json={"performance_level": 10**400}, headers=auth_headers)
    empty_name = client.put(url, json={"name": "   "}, headers=auth_headers)
    nothing = client.put(url, json={}, headers=auth_headers)

    assert bad_level.status_code == 400 and bad_level.json()["message"] == INVALID_LEVEL
    assert huge_level.status_code == 400 and huge_level.json()["message"] == INVALID_LEVEL
    assert empty_name.status_code == 400
    assert nothing.status_code == 400
    assert nothing.json()["message"] == "Aucune donnée à mettre à jour."


def test_student_detail(client, auth_headers, class_id):
    student_id = create_student(client, auth_headers, class_id, performance_level=4).json()["data"]["id"]

    data = client.get(f"/v1/students/{student_id}", headers=auth_headers).json()["data"]

    assert data["class"]["name"] == "CM1 A"
    assert data["performance_level_info"]["label"] == "Très bon niveau"
    assert data["comments"] == [] and data["student_assessments"] == []


def test_delete_student(client, auth_headers, other_headers, class_id):
    student_id = create_student(client, auth_headers, class_id).json()["data"]["id"]
    assert client.delete(f"/v1/students/{student_id}", headers=other_headers).status_code == 404
    assert client.delete(f"/v1/students/{student_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/v1/students/{student_id}", headers=auth_headers).status_code == 404


def test_bulk_create(client, auth_headers, class_id):
    r = client.post(
        "/v1/students/bulk",
        json={"class_id": class_id, "students": [{"name": "Alice", "age": 9}, {"name": " Bob "}]},
        headers=auth_headers,
    )
    assert r.status_code == 201
    assert [s["name"] for s in r.json()["data"]] == ["Alice", "Bob"]
    assert r.json()["message"] == "Successfully created 2 students"


def test_bulk_create_is_all_or_nothing(client, auth_headers, class_id):
    r = client.post(
        "/v1/students/bulk",
        json={"class_id": class_id, "students": [{"name": "Alice"}, {"name": ""}]},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert client.get(f"/v1/classes/{class_id}", headers=auth_headers).json()["data"]["students"] == []

    empty = client.post("/v1/students/bulk", json={"class_id": class_id, "students": []}, headers=auth_headers)
    assert empty.status_code == 400


def test_extract_students(client, auth_headers):
    r = client.post("/v1/students/extract", json={"image_urls": ["https://img/1.jpg"]}, headers=auth_headers)
    assert r.status_code == 200
    assert [s["name"] for s in r.json()["data"]["students"]] == ["Alice Martin", "Bob Durand"]

    assert client.post("/v1/students/extract", json={"image_urls": []}, headers=auth_headers).status_code == 400
    too_many = client.post("/v1/students/extract", json={"image_urls": ["a", "b", "c"]}, headers=auth_headers)
    assert too_many.status_code == 400


def test_comments(client, auth_headers, class_id):
    student_id = create_student(client, auth_headers, class_id).json()["data"]["id"]
    url = f"/v1/students/{student_id}/comments"

    assert client.post(url, json={"content": " "}, headers=auth_headers).status_code == 400
    client.post(url, json={"content": "Premier"}, headers=auth_headers)
    created = client.post(url, json={"content": "Second"}, headers=auth_headers)
    assert created.status_code == 201
    assert created.json()["data"]["teacher"]["name"] == "Prof Test"

    comments = client.get(url, headers=auth_headers).json()["data"]
    assert [c["content"] for c in comments] == ["Second", "Premier"]


def test_performance_levels_table(client, auth_headers):
    bands = client.get("/v1/students/performance-levels", headers=auth_headers).json()["data"]
    assert [b["value"] for b in bands] == [1, 2, 3, 4, 5]
    assert [b["min_percent"] for b in bands] == [0.0, 0.4, 0.55, 0.75, 0.9]


def test_recalculate_endpoint(client, auth_headers, class_id, lesson_id, db_session):
    student_id = create_student(client, auth_headers, class_id, performance_level=1).json()["data"]["id"]
    lesson = db_session.get(Lesson, lesson_id)
    assessment = Assessment(lesson=lesson, title="Contrôle")
    db_session.add_all([
        StudentAssessment(assessment=assessment, student_id=student_id, overall_score=80, max_score=100),
        StudentAssessment(assessment=assessment, student_id=student_id, overall_score=45, max_score=50),
    ])
    db_session.commit()
    db_session.close()

    r = client.post(f"/v1/students/{student_id}/performance/recalculate", headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["data"]["level"] == 4
    assert r.json()["data"]["average_percent"] == pytest.approx(0.85)
    assert client.get(f"/v1/students/{student_id}", headers=auth_headers).json()["data"]["performance_level"] == 4


def test_recalculate_unknown_student(client, auth_headers):
    assert client.post("/v1/students/999/performance/recalculate", headers=auth_headers).status_code == 404


def test_performance_levels_require_auth(client):
    assert client.get("/v1/students/performance-levels").status_code == 401
