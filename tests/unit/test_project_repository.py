"""Unit tests for project/asset SQL helpers against a mocked asyncpg pool."""

import pytest
from conftest import asset_row, project_row

from app.core.constants import BackendErrorCodes, ErrorMessages
from app.core.errors import BackendError
from app.repositories import project as project_repo


@pytest.mark.asyncio
async def test_fetch_single_project_embeds_assets(fake_pool) -> None:
    fake_pool.conn.fetch.side_effect = [[project_row()], [asset_row()]]

    project = await project_repo.fetch_project_with_assets(fake_pool, "proj-123", "u1")

    assert project["id"] == "proj-123"
    assert [a["id"] for a in project["assets"]] == ["asset-1"]

    project_call, asset_call = fake_pool.conn.fetch.await_args_list
    assert "WHERE id = $1::uuid AND user_id = $2::uuid" in project_call.args[0]
    assert project_call.args[1:] == ("proj-123", "u1")
    assert "FROM assets" in asset_call.args[0]
    assert asset_call.args[1] == "proj-123"


@pytest.mark.asyncio
async def test_fetch_project_without_assets_returns_empty_list(fake_pool) -> None:
    fake_pool.conn.fetch.side_effect = [[project_row()], []]

    project = await project_repo.fetch_project_with_assets(fake_pool, "proj-123", "u1")

    assert project["assets"] == []


@pytest.mark.asyncio
async def test_no_matching_row_raises_single_row_error(fake_pool) -> None:
    fake_pool.conn.fetch.side_effect = [[]]

    with pytest.raises(BackendError) as exc_info:
        await project_repo.fetch_project_with_assets(fake_pool, "proj-123", "someone-else")

    assert exc_info.value.code == BackendErrorCodes.SINGLE_ROW
    assert exc_info.value.message == ErrorMessages.SINGLE_ROW
    assert exc_info.value.details == "The result contains 0 rows"
    assert fake_pool.conn.fetch.await_count == 1


@pytest.mark.asyncio
async def test_multiple_rows_raise_single_row_error(fake_pool) -> None:
    fake_pool.conn.fetch.side_effect = [[project_row(), project_row()]]

    with pytest.raises(BackendError) as exc_info:
        await project_repo.fetch_project_with_assets(fake_pool, "proj-123", "u1")

    assert exc_info.value.details == "The result contains 2 rows"


@pytest.mark.asyncio
async def test_list_groups_assets_by_project(fake_pool) -> None:
    fake_pool.conn.fetch.side_effect = [
        [project_row("p2"), project_row("p1")],
        [asset_row("a1", "p1"), asset_row("a2", "p1")],
    ]

    projects = await project_repo.list_projects_with_assets(fake_pool, "u1")

    assert [p["id"] for p in projects] == ["p2", "p1"]
    assert projects[0]["assets"] == []
    assert [a["id"] for a in projects[1]["assets"]] == ["a1", "a2"]
    assert "ORDER BY created_at DESC" in fake_pool.conn.fetch.await_args_list[0].args[0]
    assert fake_pool.conn.fetch.await_args_list[1].args[1] == ["p2", "p1"]


@pytest.mark.asyncio
async def test_list_without_projects_skips_asset_query(fake_pool) -> None:
    fake_pool.conn.fetch.side_effect = [[]]

    assert await project_repo.list_projects_with_assets(fake_pool, "u1") == []
    assert fake_pool.conn.fetch.await_count == 1


@pytest.mark.asyncio
async def test_insert_project_starts_in_created_status(fake_pool) -> None:
    fake_pool.conn.fetchrow.return_value = project_row("new-id")

    row = await project_repo.insert_project(fake_pool, "u1", "Lakeside Villa", notes="corner lot")

    assert row["id"] == "new-id"
    args = fake_pool.conn.fetchrow.await_args.args
    assert args[1:] == ("u1", None, "Lakeside Villa", "CREATED", None, None, None, "corner lot")
