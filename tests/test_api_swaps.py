from __future__ import annotations

import pytest

MESSAGE = "Happy to trade guitar lessons for Spanish conversation."


@pytest.fixture()
def alice(make_user):
    return make_user("Alice", offered=("Guitar", "Cooking"), wanted=("Spanish",))


@pytest.fixture()
def bob(make_user):
    return make_user("Bob", offered=("Spanish", "Chess"), wanted=("Guitar",))


def _send(client, auth_headers, requester, recipient, offered="Guitar", wanted="Spanish", message=MESSAGE):
    return client.post(
        "/api/v1/swaps/",
        json={
            "to_user_id": recipient.user_id,
            "skill_offered": offered,
            "skill_wanted": wanted,
            "message": message,
        },
        headers=auth_headers(requester),
    )


def test_request_accept_complete_rate(client, auth_headers, alice, bob) -> None:
    response = _send(client, auth_headers, alice, bob)
    assert response.status_code == 201
    swap = response.json()
    assert swap["status"] == "pending"
    assert swap["skill_offered_name"] == "Guitar"

    response = client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=auth_headers(bob))
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"

    response = client.post(f"/api/v1/swaps/{swap['id']}/complete", headers=auth_headers(alice))
    assert response.json()["status"] == "completed"

    rating = {"swap_request_id": swap["id"], "rating": 5, "feedback": "Explains things clearly"}
    response = client.post("/api/v1/ratings/", json=rating, headers=auth_headers(alice))
    assert response.status_code == 201
    assert response.json()["to_user_id"] == bob.user_id

    response = client.post("/api/v1/ratings/", json=rating, headers=auth_headers(alice))
    assert response.status_code == 409
    assert response.json()["error"] == "AlreadyRated"

    response = client.get(f"/api/v1/ratings/user/{bob.user_id}")
    assert [r["rating"] for r in response.json()] == [5]


def test_error_kinds_map_to_status_codes(client, auth_headers, make_user, alice, bob) -> None:
    swap = _send(client, auth_headers, alice, bob).json()

    response = client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=auth_headers(alice))
    assert response.status_code == 403
    assert response.json()["error"] == "NotParticipant"

    client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=auth_headers(bob))
    response = client.post(f"/api/v1/swaps/{swap['id']}/accept", headers=auth_headers(bob))
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTransition"

    response = client.post(
        "/api/v1/ratings/",
        json={"swap_request_id": swap["id"], "rating": 4},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "SwapNotCompleted"

    response = client.get(f"/api/v1/swaps/{swap['id']}", headers=auth_headers(make_user("Mallory")))
    assert response.status_code == 403


def test_short_message_is_rejected(client, store, auth_headers, alice, bob) -> None:
    response = _send(client, auth_headers, alice, bob, message="Hi there!!")
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"
    assert store.tables["swap_requests"] == []


def test_unknown_skill_is_not_found(client, auth_headers, alice, bob) -> None:
    response = _send(client, auth_headers, alice, bob, wanted="Juggling")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"


def test_exchange_reports_partial_failure(client, store, auth_headers, alice, bob) -> None:
    response = client.post(
        "/api/v1/swaps/exchange",
        json={
            "to_user_id": bob.user_id,
            "message": MESSAGE,
            "exchanges": [
                {"skill_offered": "Guitar", "skill_wanted": "Spanish"},
                {"skill_offered": "Cooking", "skill_wanted": "Painting"},
            ],
        },
        headers=auth_headers(alice),
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body["created"]) == 1
    assert body["failed"]["index"] == 1
    assert len(store.tables["swap_requests"]) == 1


def test_list_and_filter_swaps(client, auth_headers, alice, bob) -> None:
    first = _send(client, auth_headers, alice, bob).json()
    second = _send(client, auth_headers, alice, bob, offered="Cooking", wanted="Chess").json()
    client.post(f"/api/v1/swaps/{second['id']}/reject", headers=auth_headers(bob))

    response = client.get("/api/v1/swaps/", headers=auth_headers(bob))
    assert {s["id"] for s in response.json()} == {first["id"], second["id"]}

    response = client.get("/api/v1/swaps/?status=rejected", headers=auth_headers(bob))
    assert [s["id"] for s in response.json()] == [second["id"]]

    response = client.get("/api/v1/swaps/?role=sent", headers=auth_headers(bob))
    assert response.json() == []


def test_cancel_and_delete(client, store, auth_headers, alice, bob) -> None:
    cancelled = _send(client, auth_headers, alice, bob).json()
    response = client.post(f"/api/v1/swaps/{cancelled['id']}/cancel", headers=auth_headers(alice))
    assert response.json()["status"] == "cancelled"

    withdrawn = _send(client, auth_headers, alice, bob, offered="Cooking", wanted="Chess").json()
    response = client.delete(f"/api/v1/swaps/{withdrawn['id']}", headers=auth_headers(bob))
    assert response.status_code == 403

    response = client.delete(f"/api/v1/swaps/{withdrawn['id']}", headers=auth_headers(alice))
    assert response.status_code == 204
    assert [s["id"] for s in store.tables["swap_requests"]] == [cancelled["id"]]


def test_malformed_swap_id(client, auth_headers, alice) -> None:
    response = client.post("/api/v1/swaps/not-a-uuid/accept", headers=auth_headers(alice))
    assert response.status_code == 422
    assert "Invalid UUID format for swap_id" in response.json()["detail"]


def test_store_failure_is_reported_generically(client, store, auth_headers, alice, bob) -> None:
    from skillswap.core.exceptions import StoreError

    store.fail("swap_requests", "insert", StoreError('relation "swap_requests" does not exist'))
    response = _send(client, auth_headers, alice, bob)

    assert response.status_code == 500
    assert "swap_requests" not in response.json()["detail"]
