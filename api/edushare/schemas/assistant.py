from pydantic import BaseModel, Field


class AssistantRequest(BaseModel):
    message: str = Field(default='', max_length=20000)
    mode: str = 'qa'


class AssistantResponse(BaseModel):
    response: str
