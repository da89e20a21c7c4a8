"""
Pytest configuration and fixtures for the test suite.
"""
import os
from typing import Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ["ENV"] = "development"
os.environ["MESSAGE_STORE"] = "memory"

from sitesmith.main import app
from sitesmith.core.deps import get_generator, get_message_store
from sitesmith.core.exceptions import GenerationError
from sitesmith.schemas.message import GeneratedWebsite
from sitesmith.services.message_store import InMemoryMessageStore


class FakeGenerator:
    """Stands in for WebsiteGenerator; returns a fixed website or raises."""

    def __init__(
        self,
        website: Optional[GeneratedWebsite] = None,
        error: Optional[GenerationError] = None,
    ):
        self.website = website
        self.error = error
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> GeneratedWebsite:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.website


@pytest.fixture
def blog_website() -> GeneratedWebsite:
    """Website bundle used by most generation tests."""
    return GeneratedWebsite(
        html="<h1>Blog</h1>",
        css="h1{color:red}",
        javascript="",
        title="My Blog",
        description="A blog",
    )


@pytest.fixture
def store() -> InMemoryMessageStore:
    """Fresh in-memory store for each test."""
    return InMemoryMessageStore()


@pytest.fixture
def generator(blog_website: GeneratedWebsite) -> FakeGenerator:
    return FakeGenerator(website=blog_website)


@pytest.fixture(scope="function")
def client(store: InMemoryMessageStore, generator: FakeGenerator) -> Generator[TestClient, None, None]:
    """Create a test client with store and generator overrides."""
    app.dependency_overrides[get_message_store] = lambda: store
    app.dependency_overrides[get_generator] = lambda: generator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
