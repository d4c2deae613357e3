from __future__ import annotations


def vote(client, auth, profile_id, user, direction):
    return client.put(f"/api/profiles/{profile_id}/vote", json={"direction": direction}, headers=auth(user))


def test_vote_requires_token(client, upload):
    created = upload("PLA Red")
    resp = client.put(f"/api/profiles/{created['id']}/vote", json={"direction": "up"})
    assert resp.status_code == 401


def test_persist_and_switch(client, auth, upload):
    created = upload("PLA Red")
    data = vote(client, auth, created["id"], "bob", "up").get_json()["data"]
    assert (data["upvotes"], data["downvotes"]) == (1, 0)
    assert data["votedUsers"] == {"bob": "up"}

    data = vote(client, auth, created["id"], "bob", "down").get_json()["data"]
    assert (data["upvotes"], data["downvotes"]) == (0, 1)
    assert data["votedUsers"] == {"bob": "down"}


def test_repeating_a_stored_vote_changes_nothing(client, auth, upload):
    created = upload("PLA Red")
    vote(client, auth, created["id"], "bob", "up")
    data = vote(client, auth, created["id"], "bob", "up").get_json()["data"]
    assert (data["upvotes"], data["downvotes"]) == (1, 0)
    assert data["votedUsers"] == {"bob": "up"}


def test_retract(client, auth, upload):
    created = upload("PLA Red")
    vote(client, auth, created["id"], "bob", "up")
    vote(client, auth, created["id"], "carol", "down")
    resp = client.delete(f"/api/profiles/{created['id']}/vote", headers=auth("bob"))
    data = resp.get_json()["data"]
    assert (data["upvotes"], data["downvotes"]) == (0, 1)
    assert data["votedUsers"] == {"carol": "down"}


def test_retract_without_vote_is_harmless(client, auth, upload):
    created = upload("PLA Red")
    resp = client.delete(f"/api/profiles/{created['id']}/vote", headers=auth("bob"))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["upvotes"] == 0


def test_invalid_direction(client, auth, upload):
    created = upload("PLA Red")
    resp = vote(client, auth, created["id"], "bob", "sideways")
    assert resp.status_code == 422


def test_vote_on_missing_profile(client, auth):
    assert vote(client, auth, "missing", "bob", "up").status_code == 404


def test_votes_sort_order_is_served(client, auth, upload):
    high = upload("High")
    low = upload("Low")
    vote(client, auth, low["id"], "bob", "down")
    vote(client, auth, high["id"], "bob", "up")
    vote(client, auth, high["id"], "carol", "up")
    names = [p["name"] for p in client.get("/api/profiles/?sort=votes").get_json()["data"]]
    assert names == ["High", "Low"]


def test_record_download_counts(client, upload):
    created = upload("PLA Red")
    assert client.post(f"/api/profiles/{created['id']}/downloads").get_json()["data"] == {"downloadCount": 1}
    assert client.post(f"/api/profiles/{created['id']}/downloads").get_json()["data"] == {"downloadCount": 2}
    assert client.post("/api/profiles/missing/downloads").status_code == 404


def test_download_returns_file_and_counts(client, auth, upload):
    created = upload("PLA Red", content=b'{"nozzle_temperature": [220]}', filename="pla_red.json")
    resp = client.get(f"/api/profiles/{created['id']}/download", headers=auth("bob"))
    assert resp.status_code == 200
    assert resp.data == b'{"nozzle_temperature": [220]}'
    assert "pla_red.json" in resp.headers["Content-Disposition"]
    assert client.get(f"/api/profiles/{created['id']}").get_json()["data"]["downloadCount"] == 1
