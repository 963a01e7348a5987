def create_program(client, headers, title="Français"):
    return client.post("/v1/programs/", json={"title": title}, headers=headers).json()["data"]


def create_lesson(client, headers, program_id, title, **fields):
    r = client.post("/v1/lessons/", json={"program_id": program_id, "title": title, **fields}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["data"]


def test_program_crud(client, auth_headers):
    assert client.post("/v1/programs/", json={"title": ""}, headers=auth_headers).status_code == 400
    program = create_program(client, auth_headers)

    updated = client.put(
        f"/v1/programs/{program['id']}", json={"description": "CE2, période 1"}, headers=auth_headers
    ).json()["data"]
    assert updated["title"] == "Français"
    assert updated["description"] == "CE2, période 1"

    assert [p["id"] for p in client.get("/v1/programs/", headers=auth_headers).json()["data"]] == [program["id"]]
    assert client.delete(f"/v1/programs/{program['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/v1/programs/{program['id']}", headers=auth_headers).status_code == 404


def test_programs_are_private(client, auth_headers, other_headers):
    program = create_program(client, auth_headers)
    assert client.get(f"/v1/programs/{program['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/v1/programs/{program['id']}", headers=other_headers).status_code == 404


def test_lessons_are_appended_in_order(client, auth_headers):
    program = create_program(client, auth_headers)
    first = create_lesson(client, auth_headers, program["id"], "Le nom")
    second = create_lesson(client, auth_headers, program["id"], "Le verbe")
    pinned = create_lesson(client, auth_headers, program["id"], "L'adjectif", order_index=10)
    after = create_lesson(client, auth_headers, program["id"], "Le pronom")

    assert (first["order_index"], second["order_index"], pinned["order_index"], after["order_index"]) == (0, 1, 10, 11)

    detail = client.get(f"/v1/programs/{program['id']}", headers=auth_headers).json()["data"]
    assert [l["title"] for l in detail["lessons"]] == ["Le nom", "Le verbe", "L'adjectif", "Le pronom"]


def test_lesson_update_and_delete(client, auth_headers, other_headers):
    program = create_program(client, auth_headers)
    lesson = create_lesson(client, auth_headers, program["id"], "Le nom")
    url = f"/v1/lessons/{lesson['id']}"

    assert client.put(url, json={"title": "Nope"}, headers=other_headers).status_code == 404
    assert client.put(url, json={"title": ""}, headers=auth_headers).status_code == 400
    updated = client.put(url, json={"test_data": "dictée"}, headers=auth_headers).json()["data"]
    assert updated["title"] == "Le nom" and updated["test_data"] == "dictée"

    assert client.delete(url, headers=auth_headers).status_code == 200
    assert client.put(url, json={"title": "x"}, headers=auth_headers).status_code == 404


def test_lesson_requires_owned_program(client, auth_headers, other_headers):
    program = create_program(client, auth_headers)
    r = client.post("/v1/lessons/", json={"program_id": program["id"], "title": "X"}, headers=other_headers)
    assert r.status_code == 404
    assert client.post("/v1/lessons/", json={"title": "X"}, headers=auth_headers).status_code == 400


def test_links(client, auth_headers, other_headers):
    program = create_program(client, auth_headers)
    a = create_lesson(client, auth_headers, program["id"], "A")
    b = create_lesson(client, auth_headers, program["id"], "B")
    foreign = create_lesson(client, other_headers, create_program(client, other_headers)["id"], "F")

    def link(from_id, to_id, headers=auth_headers, **extra):
        return client.post(
            "/v1/links/", json={"from_lesson_id": from_id, "to_lesson_id": to_id, **extra}, headers=headers
        )

    created = link(a["id"], b["id"])
    assert created.status_code == 201
    assert created.json()["data"]["relation_type"] == "prerequisite"
    assert created.json()["data"]["to_lesson"]["title"] == "B"

    assert link(a["id"], None).status_code == 400
    assert link(a["id"], a["id"]).status_code == 400
    assert link(a["id"], 9999).status_code == 404
    assert link(a["id"], foreign["id"]).status_code == 403
    assert link(a["id"], b["id"]).status_code == 409
    assert link(b["id"], a["id"], relation_type="related").json()["data"]["relation_type"] == "related"

    detail = client.get(f"/v1/programs/{program['id']}", headers=auth_headers).json()["data"]
    assert len(detail["links"]) == 2
    assert [l["to_lesson_id"] for l in detail["lessons"][0]["from_links"]] == [b["id"]]

    link_id = created.json()["data"]["id"]
    assert client.delete(f"/v1/links/{link_id}", headers=other_headers).status_code == 403
    assert client.delete(f"/v1/links/{link_id}", headers=auth_headers).status_code == 200
    assert client.delete(f"/v1/links/{link_id}", headers=auth_headers).status_code == 404


def test_deleting_lesson_removes_its_links(client, auth_headers):
    program = create_program(client, auth_headers)
    a = create_lesson(client, auth_headers, program["id"], "A")
    b = create_lesson(client, auth_headers, program["id"], "B")
    client.post("/v1/links/", json={"from_lesson_id": a["id"], "to_lesson_id": b["id"]}, headers=auth_headers)

    client.delete(f"/v1/lessons/{b['id']}", headers=auth_headers)

    detail = client.get(f"/v1/programs/{program['id']}", headers=auth_headers).json()["data"]
    assert detail["links"] == []
    assert detail["lessons"][0]["from_links"] == []
