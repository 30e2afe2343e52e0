"""API tests for /api/companies using real session auth over a mocked pool."""

import asyncpg
from conftest import company_row

from app.core.constants import ErrorMessages

# ---------------------------------------------------------------------------
# GET /api/companies
# ---------------------------------------------------------------------------


def test_list_companies_without_session_is_401(client, pool_factory) -> None:
    response = client.get("/api/companies")

    assert response.status_code == 401
    assert response.json() == {"message": ErrorMessages.UNAUTHORIZED}
    pool_factory.assert_not_awaited()


def test_list_companies_returns_bare_array_ordered_by_name(
    client, fake_pool, auth_headers
) -> None:
    fake_pool.conn.fetch.return_value = [
        company_row("c1", "Acme Homes"),
        company_row("c2", "Birch Builders", website="https://birch.example.com"),
    ]

    response = client.get("/api/companies", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert [c["name"] for c in body] == ["Acme Homes", "Birch Builders"]
    assert body[1]["website"] == "https://birch.example.com"
    assert "ORDER BY name ASC" in fake_pool.conn.fetch.await_args.args[0]


def test_list_companies_db_failure_hides_backend_message(client, fake_pool, auth_headers) -> None:
    fake_pool.conn.fetch.side_effect = asyncpg.UndefinedTableError(
        'relation "companies" does not exist'
    )

    response = client.get("/api/companies", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"message": ErrorMessages.INTERNAL}


# ---------------------------------------------------------------------------
# POST /api/companies
# ---------------------------------------------------------------------------


def test_create_company_defaults_color_and_blank_fields(client, fake_pool, auth_headers) -> None:
    fake_pool.conn.fetchrow.return_value = company_row("new-co", "Cedar & Co")

    response = client.post(
        "/api/companies",
        headers=auth_headers,
        json={"name": "Cedar & Co", "primary_color": "", "contact_email": "", "website": None},
    )

    assert response.status_code == 200
    assert response.json()["id"] == "new-co"
    args = fake_pool.conn.fetchrow.await_args.args
    assert "INSERT INTO companies" in args[0]
    assert args[1:] == ("Cedar & Co", "#6366f1", None, None, None)


def test_create_company_keeps_given_values(client, fake_pool, auth_headers) -> None:
    fake_pool.conn.fetchrow.return_value = company_row(
        "new-co", "Dune Estates", primary_color="#112233", contact_phone="555-0100"
    )

    response = client.post(
        "/api/companies",
        headers=auth_headers,
        json={"name": "Dune Estates", "primary_color": "#112233", "contact_phone": "555-0100"},
    )

    assert response.status_code == 200
    assert response.json()["primary_color"] == "#112233"
    args = fake_pool.conn.fetchrow.await_args.args
    assert args[1:] == ("Dune Estates", "#112233", None, "555-0100", None)


def test_create_company_requires_name(client, fake_pool, auth_headers) -> None:
    response = client.post("/api/companies", headers=auth_headers, json={"website": "x"})

    assert response.status_code == 422
    fake_pool.conn.fetchrow.assert_not_awaited()


def test_create_company_without_session_is_401(client, pool_factory) -> None:
    response = client.post("/api/companies", json={"name": "Acme Homes"})

    assert response.status_code == 401
    pool_factory.assert_not_awaited()


def test_create_company_db_failure_is_generic_500(client, fake_pool, auth_headers) -> None:
    fake_pool.conn.fetchrow.side_effect = ConnectionResetError("connection reset")

    response = client.post("/api/companies", headers=auth_headers, json={"name": "Acme Homes"})

    assert response.status_code == 500
    assert response.json() == {"message": ErrorMessages.INTERNAL}
