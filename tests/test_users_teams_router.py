"""Tests for the users and teams routers and the health probe."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from ludicboard import __version__
from tests.utils import api_path, auth_headers, make_user


class TestUsersRouter:
    """Read-only user directory."""

    def test_list_users(self, client: TestClient, db_session: Session) -> None:
        bob = make_user(db_session, "bob")
        make_user(db_session, "alice")

        response = client.get(api_path("/users/"), headers=auth_headers(bob))

        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["alice", "bob"]
        assert "passwordHash" not in response.json()[0]

    def test_get_user(self, client: TestClient, db_session: Session) -> None:
        alice = make_user(db_session, "alice")

        response = client.get(api_path(f"/users/{alice.user_id}"), headers=auth_headers(alice))

        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    def test_get_missing_user(self, client: TestClient, db_session: Session) -> None:
        alice = make_user(db_session, "alice")

        response = client.get(api_path("/users/999"), headers=auth_headers(alice))

        assert response.status_code == 404
        assert response.json() == {"status": "fail", "message": "User not found"}


class TestTeamsRouter:
    """Teams are global; any authenticated user may list or create them."""

    def test_create_and_list(self, client: TestClient, db_session: Session) -> None:
        alice = make_user(db_session, "alice")
        headers = auth_headers(alice)

        created = client.post(
            api_path("/teams/"),
            json={"teamName": "  Platform ", "productOwnerUserId": alice.user_id},
            headers=headers,
        )

        assert created.status_code == 201
        assert created.json()["teamName"] == "Platform"
        assert created.json()["productOwnerUserId"] == alice.user_id

        listing = client.get(api_path("/teams/"), headers=headers)
        assert [t["teamName"] for t in listing.json()] == ["Platform"]

    def test_duplicate_name(self, client: TestClient, db_session: Session) -> None:
        alice = make_user(db_session, "alice")
        headers = auth_headers(alice)
        client.post(api_path("/teams/"), json={"teamName": "Platform"}, headers=headers)

        response = client.post(api_path("/teams/"), json={"teamName": "Platform"}, headers=headers)

        assert response.status_code == 400

    def test_unknown_product_owner(self, client: TestClient, db_session: Session) -> None:
        alice = make_user(db_session, "alice")

        response = client.post(
            api_path("/teams/"),
            json={"teamName": "Ghosts", "productOwnerUserId": 999},
            headers=auth_headers(alice),
        )

        assert response.status_code == 404


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.json() == {"status": "ok", "version": __version__}
