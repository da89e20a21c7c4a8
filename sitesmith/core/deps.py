"""
Common dependencies for FastAPI endpoints.
"""
from fastapi import Depends, Request

from sitesmith.services.generation_handler import GenerationHandler
from sitesmith.services.message_store import MessageStore
from sitesmith.services.website_generator import WebsiteGenerator, get_website_generator


def get_message_store(request: Request) -> MessageStore:
    """
    Message store dependency.

    The store is created once at startup and lives on the application state.
    """
    return request.app.state.message_store


def get_generator() -> WebsiteGenerator:
    return get_website_generator()


def get_generation_handler(
    store: MessageStore = Depends(get_message_store),
    generator: WebsiteGenerator = Depends(get_generator),
) -> GenerationHandler:
    return GenerationHandler(store, generator)
