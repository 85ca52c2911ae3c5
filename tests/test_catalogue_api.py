"""Integration tests for the catalogue REST endpoints.

Examples
--------
Run the API tests:

>>> pytest tests/test_catalogue_api.py -v
"""

from __future__ import annotations

import typing as typ
import uuid

if typ.TYPE_CHECKING:
    from falcon import testing

    from reelbase.catalogue.domain import User


def _headers(user: User) -> dict[str, str]:
    return {"X-User-Id": str(user.id)}


def _create_movie(
    client: testing.TestClient,
    user: User,
    *,
    title: str = "Chinatown",
) -> dict[str, typ.Any]:
    """Create a movie and return its payload."""
    response = client.simulate_post(
        "/movies",
        json={
            "title": title,
            "date_released": "1974-06-20",
            "duration": 130,
            "poster": "chinatown.jpg",
        },
        headers=_headers(user),
    )
    assert response.status_code == 201, "Expected movie creation to return 201."
    return typ.cast("dict[str, typ.Any]", response.json)


def _create_series(client: testing.TestClient, user: User) -> str:
    """Create a series and return its identifier."""
    response = client.simulate_post(
        "/series",
        json={"title": "Twin Peaks", "date_started": "1990-04-08"},
        headers=_headers(user),
    )
    assert response.status_code == 201, "Expected series creation to return 201."
    return typ.cast("str", response.json["id"])


def test_movie_lifecycle(
    api_client: testing.TestClient,
    contributor: User,
) -> None:
    """Movies can be created, patched, invalidated and audited."""
    movie = _create_movie(api_client, contributor)
    path = f"/movies/{movie['id']}"

    patched = api_client.simulate_patch(
        path, json={"title": "Chinatown (1974)"}, headers=_headers(contributor)
    )
    invalidated = api_client.simulate_post(
        f"{path}/invalidate",
        json={"note": "Wrong studio"},
        headers=_headers(contributor),
    )
    audits = api_client.simulate_get(f"{path}/audits")
    fetched = api_client.simulate_get(path)

    assert movie["kind"] == "movie", "Expected a movie."
    assert movie["series_id"] is None, "Expected no series for a movie."
    assert patched.status_code == 200, "Expected the patch to succeed."
    assert invalidated.json["invalidation"] == "Wrong studio", "Expected the note."
    assert audits.json["total"] == 2, "Expected two audit rows."
    assert audits.json["items"][0]["title"] == "Chinatown (1974)", (
        "Expected the newest audit row first."
    )
    assert "poster" not in audits.json["items"][0], "Expected no poster in audits."
    assert fetched.json["title"] == "Chinatown (1974)", "Expected the patched title."
    assert fetched.json["poster"] == "chinatown.jpg", "Expected the poster kept."


def test_clear_invalidation_with_empty_body(
    api_client: testing.TestClient,
    contributor: User,
) -> None:
    """An invalidate request without a body clears the note."""
    movie = _create_movie(api_client, contributor)
    path = f"/movies/{movie['id']}/invalidate"
    api_client.simulate_post(path, json={"note": "Spam"}, headers=_headers(contributor))

    cleared = api_client.simulate_post(path, headers=_headers(contributor))

    assert cleared.status_code == 200, "Expected the clear to succeed."
    assert cleared.json["invalidation"] is None, "Expected the note cleared."


def test_validation_errors_list_fields(
    api_client: testing.TestClient,
    contributor: User,
) -> None:
    """Invalid payloads answer 400 with every offending field."""
    response = api_client.simulate_post(
        "/movies",
        json={"title": "", "date_released": "1700-01-01", "duration": 0},
        headers=_headers(contributor),
    )

    assert response.status_code == 400, "Expected a validation failure."
    assert set(response.json["errors"]) == {
        "title",
        "date_released",
        "duration",
    }, "Expected one entry per invalid field."


def test_query_option_errors(api_client: testing.TestClient) -> None:
    """Invalid paging and sort options answer 400."""
    response = api_client.simulate_get(
        "/movies",
        params={"page": "0", "sort_field": "password", "sort_order": "up"},
    )

    assert response.status_code == 400, "Expected invalid options to be rejected."
    assert set(response.json["errors"]) == {"page", "sort_field", "sort_order"}, (
        "Expected every invalid option."
    )


def test_page_past_largest_offset_is_400(api_client: testing.TestClient) -> None:
    """Pages that would skip more rows than storage can address answer 400."""
    response = api_client.simulate_get(
        "/movies",
        params={"page": "99999999999999999999", "page_size": "100"},
    )

    assert response.status_code == 400, "Expected an oversized page to be rejected."
    assert set(response.json["errors"]) == {"page"}, "Expected only a page error."


def test_movie_pages(
    api_client: testing.TestClient,
    contributor: User,
) -> None:
    """Movie listings report totals and page counts."""
    for title in ("Annie Hall", "Manhattan", "Zelig"):
        _create_movie(api_client, contributor, title=title)

    response = api_client.simulate_get(
        "/movies",
        params={"page": "2", "page_size": "2", "sort_field": "title"},
    )

    assert response.status_code == 200, "Expected the listing to succeed."
    assert [item["title"] for item in response.json["items"]] == ["Zelig"], (
        "Expected the last movie on page 2."
    )
    assert (response.json["total"], response.json["page_count"]) == (3, 2), (
        "Expected three movies across two pages."
    )


def test_mutations_require_user(api_client: testing.TestClient) -> None:
    """Writes without a user header are unauthorized."""
    response = api_client.simulate_post(
        "/movies",
        json={"title": "Network", "date_released": "1976-11-27"},
    )

    assert response.status_code == 401, "Expected an unauthorized response."


def test_unregistered_user_is_404(api_client: testing.TestClient) -> None:
    """Writes by a user id that was never registered answer 404."""
    response = api_client.simulate_post(
        "/movies",
        json={"title": "Network", "date_released": "1976-11-27"},
        headers={"X-User-Id": str(uuid.uuid4())},
    )

    assert response.status_code == 404, "Expected an unregistered user to be 404."


def test_unknown_movie_is_404(api_client: testing.TestClient) -> None:
    """Unknown and malformed identifiers answer 404 and 400."""
    missing = api_client.simulate_get(f"/movies/{uuid.uuid4()}")
    malformed = api_client.simulate_get("/movies/not-a-uuid")

    assert missing.status_code == 404, "Expected an unknown movie to be 404."
    assert malformed.status_code == 400, "Expected a malformed id to be 400."


def test_series_and_episode_routes(
    api_client: testing.TestClient,
    contributor: User,
) -> None:
    """Episodes are created by position and replaced per season."""
    series_id = _create_series(api_client, contributor)
    season = f"/series/{series_id}/seasons/1"

    created = api_client.simulate_post(
        f"{season}/episodes/1",
        json={"title": "Pilot", "date_released": "1990-04-08"},
        headers=_headers(contributor),
    )
    duplicate = api_client.simulate_post(
        f"{season}/episodes/1",
        json={"title": "Pilot", "date_released": "1990-04-08"},
        headers=_headers(contributor),
    )
    put_all = api_client.simulate_put(
        f"{season}/episodes",
        json={
            "episodes": [
                {"title": "Northwest Passage", "date_released": "1990-04-08"},
                {"title": "Traces to Nowhere", "date_released": "1990-04-12"},
            ]
        },
        headers=_headers(contributor),
    )
    listing = api_client.simulate_get(f"/series/{series_id}/episodes")
    season_audits = api_client.simulate_get(f"{season}/audits")

    assert created.status_code == 201, "Expected episode creation to return 201."
    assert created.json["kind"] == "episode", "Expected an episode."
    assert duplicate.status_code == 400, "Expected a taken position to be 400."
    assert "episode_number" in duplicate.json["errors"], "Expected a position error."
    assert put_all.status_code == 200, "Expected the season put to succeed."
    assert [item["episode_number"] for item in put_all.json["items"]] == [1, 2], (
        "Expected positions 1 and 2."
    )
    assert listing.json["total"] == 2, "Expected two episodes."
    assert season_audits.json["total"] == 1, "Expected one replaced episode."


def test_season_invalidate_and_unknown_series(
    api_client: testing.TestClient,
    contributor: User,
) -> None:
    """Season invalidation flags episodes; unknown series answer 404."""
    series_id = _create_series(api_client, contributor)
    season = f"/series/{series_id}/seasons/2"
    api_client.simulate_put(
        f"{season}/episodes/1",
        json={"title": "May the Giant Be with You", "date_released": "1990-09-30"},
        headers=_headers(contributor),
    )

    flagged = api_client.simulate_post(
        f"{season}/invalidate",
        json={"note": "Air dates are wrong"},
        headers=_headers(contributor),
    )
    unknown = api_client.simulate_get(f"/series/{uuid.uuid4()}/episodes")

    assert flagged.status_code == 200, "Expected the invalidation to succeed."
    assert [item["invalidation"] for item in flagged.json["items"]] == [
        "Air dates are wrong"
    ], "Expected the note on every episode."
    assert unknown.status_code == 404, "Expected an unknown series to be 404."


def test_watchlist_routes(
    api_client: testing.TestClient,
    contributor: User,
    other_user: User,
) -> None:
    """Watchlist rows are added, filtered, watched and removed per user."""
    movie = _create_movie(api_client, contributor)

    added = api_client.simulate_post(
        "/watchlist", json={"film_id": movie["id"]}, headers=_headers(contributor)
    )
    watch_id = added.json["id"]
    foreign = api_client.simulate_post(
        f"/watchlist/{watch_id}/watched", headers=_headers(other_user)
    )
    watched = api_client.simulate_post(
        f"/watchlist/{watch_id}/watched", headers=_headers(contributor)
    )
    listed = api_client.simulate_get(
        "/watchlist", params={"filter": "watched"}, headers=_headers(contributor)
    )
    removed = api_client.simulate_delete(
        f"/watchlist/{watch_id}", headers=_headers(contributor)
    )
    emptied = api_client.simulate_get("/watchlist", headers=_headers(contributor))

    assert added.status_code == 201, "Expected the add to return 201."
    assert foreign.status_code == 404, "Expected another user's row to be 404."
    assert watched.json["watched"] is True, "Expected the row to be watched."
    assert listed.json["items"][0]["film"]["id"] == movie["id"], (
        "Expected the listed film to be embedded."
    )
    assert removed.status_code == 204, "Expected the delete to return 204."
    assert emptied.json["total"] == 0, "Expected an empty watchlist."
