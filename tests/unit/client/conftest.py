"""Fixtures wiring the client library to an in-process API server."""

import httpx
import pytest


@pytest.fixture
def storage(tmp_path):
    from applytrack.client.storage import LocalStorage

    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
async def server_app(app_settings):
    """The API app with its lifespan (database) running."""
    from applytrack.api import create_app

    app = create_app(app_settings)
    async with app.router.lifespan_context(app):
        yield app


@pytest.fixture
async def client(app_settings, server_app):
    """A fully wired client talking to ``server_app`` in-process."""
    from applytrack.client import open_client

    async with open_client(app_settings, transport=httpx.ASGITransport(app=server_app)) as ctx:
        yield ctx
