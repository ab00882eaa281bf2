"""
HTTP-level tests for the lists, invitations and admin routers.
"""

from seenlist.core.config import get_settings

from tests.factories import make_movie, make_series


def create_list(client, headers, name="Movie Night"):
    response = client.post("/lists", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestAuthentication:

    def test_missing_token(self, client):
        assert client.get("/lists").status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/lists", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestListEndpoints:

    def test_create_and_get(self, client, auth_headers, owner):
        created = create_list(client, auth_headers(owner))

        response = client.get(f"/lists/{created['id']}", headers=auth_headers(owner))

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Movie Night"
        assert body["items"] == []
        assert body["collaborators"] == []
        assert body["owner_id"] == owner.id
        assert body["isOwner"] is True

    def test_blank_name(self, client, auth_headers, owner):
        response = client.post("/lists", json={"name": "  "}, headers=auth_headers(owner))
        assert response.status_code == 400

    def test_get_missing(self, client, auth_headers, owner):
        assert client.get("/lists/nope", headers=auth_headers(owner)).status_code == 404

    def test_get_forbidden(self, client, auth_headers, owner, bob):
        created = create_list(client, auth_headers(owner))
        assert client.get(f"/lists/{created['id']}", headers=auth_headers(bob)).status_code == 403

    def test_update(self, client, auth_headers, owner):
        created = create_list(client, auth_headers(owner))

        response = client.put(
            f"/lists/{created['id']}",
            json={"description": "Fridays", "is_public": True},
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Fridays"
        shared = client.get(f"/shared-lists/{created['id']}")
        assert shared.status_code == 200
        assert shared.json()["name"] == "Movie Night"

    def test_delete_owner_only(self, client, auth_headers, owner, bob):
        created = create_list(client, auth_headers(owner))

        assert client.delete(f"/lists/{created['id']}", headers=auth_headers(bob)).status_code == 403
        response = client.delete(f"/lists/{created['id']}", headers=auth_headers(owner))

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get(f"/lists/{created['id']}", headers=auth_headers(owner)).status_code == 404


class TestCollaborationEndpoints:

    def test_invite_accept_flow(self, client, auth_headers, owner, alice):
        created = create_list(client, auth_headers(owner))
        list_id = created["id"]

        invite = client.post(
            f"/lists/{list_id}/collaborators",
            json={"inviteeEmail": alice.email},
            headers=auth_headers(owner),
        )
        assert invite.status_code == 200
        [record] = invite.json()["collaborators"]
        assert record["status"] == "pending"
        assert record["invitedByName"] == owner.name

        duplicate = client.post(
            f"/lists/{list_id}/collaborators",
            json={"inviteeEmail": alice.email},
            headers=auth_headers(owner),
        )
        assert duplicate.status_code == 409

        pending = client.get("/invitations", params={"email": alice.email}, headers=auth_headers(alice))
        assert pending.status_code == 200
        assert [(i["listId"], i["listName"]) for i in pending.json()] == [(list_id, "Movie Night")]

        reply = client.post(
            "/invitations",
            json={"listId": list_id, "email": alice.email, "accept": True},
            headers=auth_headers(alice),
        )
        assert reply.status_code == 200
        assert reply.json() == {"success": True, "status": "accepted"}

        overview = client.get("/lists", headers=auth_headers(alice)).json()
        assert [(doc["id"], doc["isOwner"]) for doc in overview] == [(list_id, False)]

    def test_invitations_for_another_email(self, client, auth_headers, alice, bob):
        response = client.get("/invitations", params={"email": bob.email}, headers=auth_headers(alice))
        assert response.status_code == 401

    def test_invitations_requires_email(self, client, auth_headers, alice):
        assert client.get("/invitations", headers=auth_headers(alice)).status_code == 400

    def test_reply_identity_mismatch(self, client, auth_headers, owner, alice, bob):
        created = create_list(client, auth_headers(owner))
        response = client.post(
            "/invitations",
            json={"listId": created["id"], "email": alice.email, "accept": True},
            headers=auth_headers(bob),
        )
        assert response.status_code == 401

    def test_reply_without_invitation(self, client, auth_headers, owner, alice):
        created = create_list(client, auth_headers(owner))
        response = client.post(
            "/invitations",
            json={"listId": created["id"], "email": alice.email, "accept": False},
            headers=auth_headers(alice),
        )
        assert response.status_code == 404

    def test_non_owner_invite(self, client, auth_headers, owner, alice, bob):
        created = create_list(client, auth_headers(owner))
        response = client.post(
            f"/lists/{created['id']}/collaborators",
            json={"inviteeEmail": bob.email},
            headers=auth_headers(alice),
        )
        assert response.status_code == 403

    def test_remove_collaborator(self, client, auth_headers, owner, alice):
        created = create_list(client, auth_headers(owner))
        client.post(
            f"/lists/{created['id']}/collaborators",
            json={"inviteeEmail": alice.email},
            headers=auth_headers(owner),
        )

        response = client.delete(
            f"/lists/{created['id']}/collaborators/{alice.email}", headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert response.json()["collaborators"] == []


class TestItemEndpoints:

    def test_add_duplicate_and_toggle(self, client, auth_headers, owner):
        headers = auth_headers(owner)
        list_id = create_list(client, headers)["id"]
        movie = make_movie().model_dump(mode="json", by_alias=True)

        added = client.post(f"/lists/{list_id}/items", json=movie, headers=headers)
        assert added.status_code == 201
        assert added.json()["items"][0]["addedBy"] == owner.id

        assert client.post(f"/lists/{list_id}/items", json=movie, headers=headers).status_code == 409

        toggled = client.put(f"/lists/{list_id}/items/movie-603/watched", json={"watched": True}, headers=headers)
        assert toggled.status_code == 200
        item = toggled.json()["items"][0]
        assert item["watched"] is True
        assert item["watchedAt"] is not None

        missing = client.put(f"/lists/{list_id}/items/movie-1/watched", json={"watched": True}, headers=headers)
        assert missing.status_code == 404

    def test_series_progress(self, client, auth_headers, owner):
        headers = auth_headers(owner)
        list_id = create_list(client, headers)["id"]
        series = make_series().model_dump(mode="json", by_alias=True)
        client.post(f"/lists/{list_id}/items", json=series, headers=headers)

        season = client.put(
            f"/lists/{list_id}/items/tv-1399/seasons/1/watched", json={"watched": True}, headers=headers
        )
        assert season.json()["items"][0]["watchProgress"] == 50.0

        episode = client.put(
            f"/lists/{list_id}/items/tv-1399/seasons/2/episodes/999/watched",
            json={"watched": True},
            headers=headers,
        )
        assert episode.status_code == 404

    def test_filter_stats_random(self, client, auth_headers, owner):
        headers = auth_headers(owner)
        list_id = create_list(client, headers)["id"]
        client.post(f"/lists/{list_id}/items", json=make_movie().model_dump(mode="json", by_alias=True), headers=headers)
        client.post(f"/lists/{list_id}/items", json=make_series().model_dump(mode="json", by_alias=True), headers=headers)

        movies = client.get(f"/lists/{list_id}/items", params={"type": "movie"}, headers=headers)
        assert [i["id"] for i in movies.json()] == ["movie-603"]

        stats = client.get(f"/lists/{list_id}/stats", headers=headers).json()
        assert stats["totalItems"] == 2
        assert stats["seriesCount"] == 1

        picked = client.get(f"/lists/{list_id}/random", params={"type": "series"}, headers=headers)
        assert picked.json()["id"] == "tv-1399"

    def test_outsider_cannot_edit_items(self, client, auth_headers, owner, bob):
        headers = auth_headers(owner)
        list_id = create_list(client, headers)["id"]
        client.post(f"/lists/{list_id}/items", json=make_movie().model_dump(mode="json", by_alias=True), headers=headers)

        toggled = client.put(
            f"/lists/{list_id}/items/movie-603/watched", json={"watched": True}, headers=auth_headers(bob)
        )
        removed = client.delete(f"/lists/{list_id}/items/movie-603", headers=auth_headers(bob))

        assert toggled.status_code == 403
        assert removed.status_code == 403
        assert client.get(f"/lists/{list_id}/items", headers=headers).json()[0]["watched"] is False

    def test_remove_item(self, client, auth_headers, owner):
        headers = auth_headers(owner)
        list_id = create_list(client, headers)["id"]
        client.post(f"/lists/{list_id}/items", json=make_movie().model_dump(mode="json", by_alias=True), headers=headers)

        response = client.delete(f"/lists/{list_id}/items/movie-603", headers=headers)

        assert response.status_code == 200
        assert response.json()["items"] == []


class TestAdminEndpoints:

    def test_wrong_key(self, client):
        response = client.post("/admin/migrate-collaborators", params={"key": "wrong"})
        assert response.status_code == 401

    def test_migration_runs(self, client):
        key = get_settings().MIGRATION_SECRET_KEY
        response = client.post("/admin/migrate-collaborators", params={"key": key})
        assert response.status_code == 200
        assert response.json()["migrated"] == 0


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
