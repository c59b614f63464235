from fastapi import APIRouter, Depends, HTTPException

from edushare.models.user import User
from edushare.routes.deps import get_current_user
from edushare.schemas.assistant import AssistantRequest, AssistantResponse
from edushare.services.assistant_service import (
    AssistantService, AssistantError, AssistantNotConfigured, InvalidAssistantRequest,
)

router = APIRouter()


def get_assistant() -> AssistantService:
    return AssistantService()


@router.post('', response_model=AssistantResponse)
async def chat_with_ai(
    data: AssistantRequest,
    user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant),
):
    """Ask the study assistant to summarize, explain, answer or recommend."""
    try:
        text = await assistant.reply(data.message, data.mode)
    except InvalidAssistantRequest as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AssistantNotConfigured as e:
        raise HTTPException(status_code=503, detail=str(e))
    except AssistantError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return AssistantResponse(response=text)
