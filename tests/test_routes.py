import logging
import time

from conftest import MEMBER_A, MEMBER_B, MISSING_ID, OUTSIDER, OWNER, auth_header


def create_group(client, name="Lions", owner=OWNER, members=(MEMBER_A, MEMBER_B)):
    response = client.post("/api/v1/groups", json={"name": name}, headers=auth_header(owner))
    assert response.status_code == 201, response.text
    group = response.json()
    if members:
        added = client.post(
            f"/api/v1/groups/{group['id']}/members",
            json={"user_ids": list(members)},
            headers=auth_header(owner),
        )
        assert added.status_code == 201, added.text
    return group


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/health").headers["X-Frame-Options"] == "DENY"


def test_invalid_token_is_rejected(client):
    response = client.get("/api/v1/groups", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_group_lifecycle(client):
    group = create_group(client)
    assert group["owner_id"] == OWNER

    listed = client.get("/api/v1/groups", headers=auth_header(MEMBER_A)).json()
    assert [g["id"] for g in listed["items"]] == [group["id"]]
    assert listed["error"] is None

    members = client.get(f"/api/v1/groups/{group['id']}/members", headers=auth_header(MEMBER_B)).json()
    assert sorted(m["user_id"] for m in members["items"]) == sorted([OWNER, MEMBER_A, MEMBER_B])

    left = client.delete(f"/api/v1/groups/{group['id']}/members/{MEMBER_B}", headers=auth_header(MEMBER_B))
    assert left.status_code == 204
    assert client.get(f"/api/v1/groups/{group['id']}", headers=auth_header(MEMBER_B)).status_code == 403


def test_validation_and_authorization_errors(client):
    group = create_group(client)

    blank = client.post("/api/v1/groups", json={"name": "  "}, headers=auth_header(OWNER))
    assert blank.status_code == 400
    assert blank.json()["error"] == "InvalidInputError"

    forbidden = client.post(
        f"/api/v1/groups/{group['id']}/members", json={"user_ids": [OUTSIDER]}, headers=auth_header(MEMBER_A)
    )
    assert forbidden.status_code == 403

    owner_leaves = client.delete(f"/api/v1/groups/{group['id']}/members/{OWNER}", headers=auth_header(OWNER))
    assert owner_leaves.status_code == 403

    missing = client.get(f"/api/v1/groups/{MISSING_ID}", headers=auth_header(OWNER))
    assert missing.status_code == 404

    malformed = client.get("/api/v1/groups/abc", headers=auth_header(OWNER))
    assert malformed.status_code == 400
    assert malformed.json()["error"] == "InvalidInputError"
    assert client.put("/api/v1/slots/xyz", json={"user_id": MEMBER_A}, headers=auth_header(OWNER)).status_code == 400
    assert client.post("/api/v1/groups/abc/read", headers=auth_header(OWNER)).status_code == 400


def test_messages_and_unread(client):
    group = create_group(client)
    for text in ("one", "two", "three"):
        sent = client.post(
            f"/api/v1/groups/{group['id']}/messages", json={"content": text}, headers=auth_header(MEMBER_A)
        )
        assert sent.status_code == 201

    unread = client.get("/api/v1/unread", headers=auth_header(MEMBER_B)).json()
    assert unread["counts"] == {group["id"]: 3}
    assert unread["total"] == 3

    history = client.get(f"/api/v1/groups/{group['id']}/messages", headers=auth_header(MEMBER_B)).json()
    assert [m["content"] for m in history["items"]] == ["one", "two", "three"]

    read = client.post(f"/api/v1/groups/{group['id']}/read", headers=auth_header(MEMBER_B))
    assert read.status_code == 200
    assert client.get("/api/v1/unread", headers=auth_header(MEMBER_B)).json()["counts"] == {}

    outsider_read = client.post(f"/api/v1/groups/{group['id']}/read", headers=auth_header(OUTSIDER))
    assert outsider_read.status_code == 403


def test_team_lineup_over_http(client):
    group = create_group(client)
    base = f"/api/v1/groups/{group['id']}/team"

    assert client.get(base, headers=auth_header(MEMBER_A)).json() is None

    team = client.post(base, json={"name": "Lions FC", "starters_count": 7}, headers=auth_header(OWNER)).json()
    assert team["state"] == "team_created"
    duplicate = client.post(base, json={"name": "Again", "starters_count": 7}, headers=auth_header(OWNER))
    assert duplicate.status_code == 409

    unknown = client.put(f"/api/v1/teams/{team['id']}/formation", json={"formation": "4-4-2"}, headers=auth_header(OWNER))
    assert unknown.status_code == 400

    lineup = client.put(f"/api/v1/teams/{team['id']}/formation", json={"formation": "2-3-1"}, headers=auth_header(OWNER)).json()
    assert [s["role"] for s in lineup["slots"]] == ["GK", "DEF", "DEF", "MID", "MID", "MID", "ATT"]

    goalkeeper = lineup["slots"][0]["id"]
    assigned = client.put(f"/api/v1/slots/{goalkeeper}", json={"user_id": MEMBER_A}, headers=auth_header(OWNER))
    assert assigned.json()["user_id"] == MEMBER_A
    by_member = client.put(f"/api/v1/slots/{goalkeeper}", json={"user_id": MEMBER_B}, headers=auth_header(MEMBER_B))
    assert by_member.status_code == 403

    available = client.get(f"/api/v1/teams/{team['id']}/available-players", headers=auth_header(OWNER)).json()
    assert MEMBER_A not in available

    slots = client.get(f"/api/v1/teams/{team['id']}/slots", headers=auth_header(MEMBER_B)).json()
    assert slots["items"][0]["user_id"] == MEMBER_A

    deleted = client.delete(f"/api/v1/teams/{team['id']}", headers=auth_header(OWNER))
    assert deleted.status_code == 204
    assert client.get(base, headers=auth_header(OWNER)).json() is None


def test_formation_catalog_routes(client):
    catalog = client.get("/api/v1/formations").json()["formations"]
    assert sorted(catalog) == ["11", "5", "7"]
    seven = client.get("/api/v1/formations/7").json()["formations"]["7"]
    assert [f["name"] for f in seven] == ["2-3-1", "3-2-1", "2-2-2"]
    assert client.get("/api/v1/formations/6").json() == {"formations": {"6": []}}


def test_log_timestamps_are_utc():
    assert logging.Formatter.converter is time.gmtime
