"""
Website generation endpoint.
"""
from fastapi import APIRouter, Depends

from sitesmith.core.deps import get_generation_handler
from sitesmith.schemas.message import GenerateRequest, GenerateResponse
from sitesmith.services.generation_handler import GenerationHandler

router = APIRouter(tags=["generate"])


@router.post("/generate", response_model=GenerateResponse)
async def generate_website(
    req: GenerateRequest,
    handler: GenerationHandler = Depends(get_generation_handler),
) -> GenerateResponse:
    """
    Generate a website from a description and append the exchange to the session.

    On failure nothing is written to the session's history.
    """
    result = await handler.handle(req.prompt, req.session_id)

    return GenerateResponse(
        user_message=result.user_message,
        ai_message=result.ai_message,
        generated_code=result.generated_code,
    )
