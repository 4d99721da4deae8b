"""Pytest configuration and shared fixtures.

This module provides:
- Isolation of the in-process preview page registry between tests
- FastAPI app and httpx client fixtures for route tests
- Small image payload helpers for avatar tests
"""

import os

# Set environment variables BEFORE any imports that read Settings
os.environ.setdefault("RATELIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import base64
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from services.preview_page_service import clear_pages

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

# Minimal JPEG header; content is never decoded, only base64-encoded
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"


@pytest.fixture(autouse=True)
def _clear_preview_pages():
    """Every test starts with no open preview pages."""
    clear_pages()
    yield
    clear_pages()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def jpeg_bytes() -> bytes:
    return JPEG_BYTES


@pytest.fixture
def app() -> FastAPI:
    """Provide the FastAPI app for testing."""
    from main import app as fastapi_app

    return fastapi_app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
