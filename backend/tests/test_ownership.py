from contentboard.core.config import settings


def _create(client, headers, title="Owned episode"):
    r = client.post("/api/contents", json={"title": title, "contentType": "Long"}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_records_owner_and_creator(client, editor):
    user, headers = editor
    body = _create(client, headers)
    assert body["userId"] == user.id
    assert body["creator"] == user.username


def test_other_editor_cannot_see_or_touch_record(client, editor, other_editor):
    _, headers_1 = editor
    _, headers_2 = other_editor
    item = _create(client, headers_1)

    assert client.get("/api/contents", headers=headers_2).json() == []

    r = client.get(f"/api/contents/{item['id']}", headers=headers_2)
    assert r.status_code == 403
    assert r.json()["error_code"] == "forbidden"

    assert client.patch(f"/api/contents/{item['id']}", json={"title": "Hijacked"}, headers=headers_2).status_code == 403
    assert (
        client.patch(f"/api/contents/{item['id']}/stage", json={"stage": "Published"}, headers=headers_2).status_code
        == 403
    )
    assert client.delete(f"/api/contents/{item['id']}", headers=headers_2).status_code == 403

    fetched = client.get(f"/api/contents/{item['id']}", headers=headers_1).json()
    assert fetched["title"] == item["title"]
    assert fetched["stage"] == "Idea"


def test_ownership_is_checked_before_validation(client, editor, other_editor):
    _, headers_1 = editor
    _, headers_2 = other_editor
    item = _create(client, headers_1)

    r = client.patch(f"/api/contents/{item['id']}", json={"title": "no"}, headers=headers_2)
    assert r.status_code == 403


def test_owner_lists_only_own_records(client, editor, other_editor):
    _, headers_1 = editor
    _, headers_2 = other_editor
    mine = _create(client, headers_1, title="Mine")
    _create(client, headers_2, title="Theirs")

    r = client.get("/api/contents", headers=headers_1)
    assert [c["id"] for c in r.json()] == [mine["id"]]


def test_admin_sees_and_edits_everything(client, editor, other_editor, admin):
    _, headers_1 = editor
    _, headers_2 = other_editor
    _, admin_headers = admin
    a = _create(client, headers_1, title="First")
    b = _create(client, headers_2, title="Second")

    r = client.get("/api/contents", headers=admin_headers)
    assert [c["id"] for c in r.json()] == [a["id"], b["id"]]

    r = client.patch(f"/api/contents/{a['id']}/stage", json={"stage": "Editing"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["userId"] == a["userId"]

    assert client.delete(f"/api/contents/{b['id']}", headers=admin_headers).status_code == 204


def test_unowned_records_stay_reachable_but_unlisted(client, editor):
    _, headers = editor
    unowned = _create(client, {}, title="Demo record")
    assert unowned["userId"] is None

    assert client.get("/api/contents", headers=headers).json() == []
    assert client.get(f"/api/contents/{unowned['id']}", headers=headers).status_code == 200


def test_anonymous_callers_rejected_when_demo_mode_off(client, editor, monkeypatch):
    _, headers = editor
    monkeypatch.setattr(settings, "allow_anonymous_access", False)

    r = client.get("/api/contents")
    assert r.status_code == 401
    assert r.json()["error_code"] == "unauthorized"
    assert client.post("/api/contents", json={"title": "Ep1", "contentType": "Short"}).status_code == 401

    assert client.get("/api/contents", headers=headers).status_code == 200


def test_bad_token_is_rejected(client):
    r = client.get("/api/contents", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
