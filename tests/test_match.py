"""Match sweep, grading and admin corrections."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.core.db import Database
from app.services.match import MatchService
from app.utils.misc import get_utc_now

from .conftest import RegisteredMember, RegisterMember, schedule_match, sweep

THREE_SETS_PLAYER1 = {
    "player1_set1": 6,
    "player2_set1": 4,
    "player1_set2": 3,
    "player2_set2": 6,
    "player1_set3": 6,
    "player2_set3": 2,
}
THREE_SETS_PLAYER2 = {
    "player1_set1": 4,
    "player2_set1": 6,
    "player1_set2": 6,
    "player2_set2": 3,
    "player1_set3": 2,
    "player2_set3": 6,
}


@pytest.fixture
async def players(register: RegisterMember) -> tuple[RegisteredMember, RegisteredMember]:
    return await register("alice", utr=5.0), await register("bob", utr=6.0)


async def test_sweep_is_idempotent(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)

    assert await sweep(client, admin) == 0

    time_travel(2)
    assert await sweep(client, admin) == 1
    assert await sweep(client, admin) == 0

    match = (await client.get(f"/api/matches/{match_id}", headers=alice.headers)).json()["data"]
    assert match["match"]["status"] == "Finished"


async def test_sweep_leaves_future_matches_alone(database: Database, client, players):
    alice, bob = players
    await schedule_match(client, alice, bob, days=1)
    await schedule_match(client, alice, bob, days=5)

    async with database.session() as session:
        updated = await MatchService(session).update_match_statuses(get_utc_now() + timedelta(days=3))

    assert updated == 1


async def test_sweep_requires_admin(client: AsyncClient, players):
    alice, _ = players
    response = await client.put("/api/matches/update-status", headers=alice.headers)
    assert response.status_code == 403


async def test_grade_requires_finished(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)

    pending = await client.put(
        f"/api/matches/{match_id}/grade", json=THREE_SETS_PLAYER1, headers=admin.headers
    )
    assert pending.status_code == 409

    time_travel(2)
    await sweep(client, admin)

    graded = await client.put(
        f"/api/matches/{match_id}/grade", json=THREE_SETS_PLAYER1, headers=admin.headers
    )
    assert graded.status_code == 200

    again = await client.put(
        f"/api/matches/{match_id}/grade", json=THREE_SETS_PLAYER2, headers=admin.headers
    )
    assert again.status_code == 409


@pytest.mark.parametrize(
    ("scores", "expected_winner"),
    [(THREE_SETS_PLAYER1, "player1"), (THREE_SETS_PLAYER2, "player2")],
)
async def test_grade_decides_winner(
    client: AsyncClient, admin, players, time_travel, scores, expected_winner
):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)
    time_travel(2)
    await sweep(client, admin)

    response = await client.put(
        f"/api/matches/{match_id}/grade", json=scores, headers=admin.headers
    )

    match = response.json()["data"]
    winner, loser = (alice, bob) if expected_winner == "player1" else (bob, alice)
    assert match["status"] == "Graded"
    assert match["winner_id"] == winner.id
    assert match["loser_id"] == loser.id
    assert match["winner"]["username"] == winner.username


async def test_grade_rejects_bad_scores(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)
    time_travel(2)
    await sweep(client, admin)

    tie = await client.put(
        f"/api/matches/{match_id}/grade",
        json={"player1_set1": 6, "player2_set1": 6},
        headers=admin.headers,
    )
    level = await client.put(
        f"/api/matches/{match_id}/grade",
        json={"player1_set1": 6, "player2_set1": 4, "player1_set2": 4, "player2_set2": 6},
        headers=admin.headers,
    )
    missing_first_set = await client.put(
        f"/api/matches/{match_id}/grade", json={"player1_set2": 6}, headers=admin.headers
    )

    assert tie.status_code == 422
    assert level.status_code == 422
    assert missing_first_set.status_code == 422
    assert tie.json()["status"] == "error"

    # Still gradable afterwards
    match = (await client.get(f"/api/matches/{match_id}", headers=admin.headers)).json()["data"]
    assert match["match"]["status"] == "Finished"


async def test_grade_requires_admin(client: AsyncClient, players):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)
    response = await client.put(
        f"/api/matches/{match_id}/grade", json=THREE_SETS_PLAYER1, headers=alice.headers
    )
    assert response.status_code == 403


async def test_grade_missing_match(client: AsyncClient, admin):
    response = await client.put(
        "/api/matches/999/grade", json=THREE_SETS_PLAYER1, headers=admin.headers
    )
    assert response.status_code == 404


async def test_correct_scores(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)

    too_early = await client.put(
        f"/api/matches/{match_id}", json=THREE_SETS_PLAYER1, headers=admin.headers
    )
    assert too_early.status_code == 409

    time_travel(2)
    await sweep(client, admin)
    await client.put(f"/api/matches/{match_id}/grade", json=THREE_SETS_PLAYER1, headers=admin.headers)

    corrected = await client.put(
        f"/api/matches/{match_id}", json=THREE_SETS_PLAYER2, headers=admin.headers
    )

    match = corrected.json()["data"]
    assert corrected.status_code == 200
    assert match["status"] == "Graded"
    assert match["winner_id"] == bob.id
    assert match["loser_id"] == alice.id
    assert match["player1_set1"] == 4


async def test_match_detail_summary(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)
    time_travel(2)
    await sweep(client, admin)
    await client.put(f"/api/matches/{match_id}/grade", json=THREE_SETS_PLAYER1, headers=admin.headers)

    detail = (await client.get(f"/api/matches/{match_id}", headers=bob.headers)).json()["data"]

    assert detail["summary"] == {"player1_sets": 2, "player2_sets": 1}
    assert detail["match"]["player1"]["username"] == "alice"


async def test_member_match_filters(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    played = await schedule_match(client, alice, bob, days=1)
    upcoming = await schedule_match(client, bob, alice, days=5)
    time_travel(2)
    await sweep(client, admin)
    await client.put(f"/api/matches/{played}/grade", json=THREE_SETS_PLAYER1, headers=admin.headers)

    async def ids(**params) -> list[int]:
        response = await client.get(
            f"/api/matches/member/{alice.id}", params=params, headers=alice.headers
        )
        return [match["id"] for match in response.json()["data"]]

    assert sorted(await ids()) == sorted([played, upcoming])
    assert await ids(status="history") == [played]
    assert await ids(status="upcoming") == [upcoming]
    assert await ids(result="win") == [played]
    assert await ids(result="loss") == []


async def test_finished_and_listing(client: AsyncClient, admin, players, time_travel):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)
    time_travel(2)
    await sweep(client, admin)

    finished = await client.get("/api/matches/finished", headers=admin.headers)
    listing = await client.get("/api/matches/", headers=alice.headers)

    assert [match["id"] for match in finished.json()["data"]] == [match_id]
    assert listing.json()["pagination"]["total_items"] == 1


async def test_delete_match(client: AsyncClient, admin, players):
    alice, bob = players
    match_id = await schedule_match(client, alice, bob)

    deleted = await client.delete(f"/api/matches/{match_id}", headers=admin.headers)
    missing = await client.delete(f"/api/matches/{match_id}", headers=admin.headers)

    assert deleted.status_code == 200
    assert missing.status_code == 404
