import asyncio

import pytest

from edushare.config import settings
from edushare.routes.chatbot import get_assistant
from edushare.main import app
from edushare.services.assistant_service import (
    AssistantError, AssistantNotConfigured, AssistantService, InvalidAssistantRequest,
    PROVIDER_ANTHROPIC, PROVIDER_GROQ, build_system_instruction, describe_failure,
)


class ScriptedAssistant(AssistantService):
    """Replaces the provider call with canned per-model behaviour."""

    def __init__(self, script, timeout=1.0):
        super().__init__(timeout=timeout)
        self.script = script
        self.calls = []

    async def _complete(self, provider, model, system, message):
        self.calls.append((provider, model))
        action = self.script[model]
        if isinstance(action, Exception):
            raise action
        if action == 'hang':
            await asyncio.sleep(5)
        return action


@pytest.fixture
def groq_configured(monkeypatch):
    monkeypatch.setattr(settings, 'groq_api_key', 'test-key')
    monkeypatch.setattr(settings, 'anthropic_api_key', '')
    monkeypatch.setattr(settings, 'assistant_models', ['first', 'second'])


async def test_first_model_answers(groq_configured):
    assistant = ScriptedAssistant({'first': '  Photosynthesis converts light.  ', 'second': 'unused'})

    text = await assistant.reply('What is photosynthesis?', 'explain')

    assert text == 'Photosynthesis converts light.'
    assert assistant.calls == [(PROVIDER_GROQ, 'first')]


async def test_timeout_falls_through_to_next_model(groq_configured):
    assistant = ScriptedAssistant({'first': 'hang', 'second': 'answer'}, timeout=0.05)

    assert await assistant.reply('question') == 'answer'
    assert [m for _, m in assistant.calls] == ['first', 'second']


async def test_empty_answer_falls_through(groq_configured):
    assistant = ScriptedAssistant({'first': '   ', 'second': 'answer'})
    assert await assistant.reply('question') == 'answer'


async def test_all_models_fail(groq_configured):
    assistant = ScriptedAssistant({
        'first': RuntimeError('boom'),
        'second': RuntimeError('Rate limit reached for model'),
    })

    with pytest.raises(AssistantError, match='Rate limit exceeded'):
        await assistant.reply('question')


async def test_anthropic_used_without_groq_key(monkeypatch):
    monkeypatch.setattr(settings, 'groq_api_key', '')
    monkeypatch.setattr(settings, 'anthropic_api_key', 'test-key')
    monkeypatch.setattr(settings, 'assistant_fallback_models', ['claude'])
    assistant = ScriptedAssistant({'claude': 'hi'})

    assert await assistant.reply('hello') == 'hi'
    assert assistant.calls == [(PROVIDER_ANTHROPIC, 'claude')]


async def test_not_configured(monkeypatch):
    monkeypatch.setattr(settings, 'groq_api_key', '')
    monkeypatch.setattr(settings, 'anthropic_api_key', '')

    with pytest.raises(AssistantNotConfigured):
        await AssistantService().reply('hello')


async def test_input_validation(groq_configured):
    assistant = ScriptedAssistant({})

    with pytest.raises(InvalidAssistantRequest, match='Message is required'):
        await assistant.reply('   ')
    with pytest.raises(InvalidAssistantRequest, match='Invalid mode'):
        await assistant.reply('hello', 'poetry')
    assert assistant.calls == []


def test_system_instruction_per_mode():
    assert 'bullet points' in build_system_instruction('summarize')
    assert 'beginner-friendly' in build_system_instruction('explain')
    assert build_system_instruction('unknown') == build_system_instruction('qa')


def test_describe_failure():
    assert describe_failure(None, ['a']) == 'All models failed. Please try again later.'
    assert 'Invalid API key' in describe_failure(RuntimeError('Invalid API Key'), ['a'])
    assert 'a, b' in describe_failure(RuntimeError('model not found'), ['a', 'b'])
    assert 'too long' in describe_failure(asyncio.TimeoutError(), ['a'])


# ── Route ────────────────────────────────────────────────────────────────────

async def test_chatbot_route(client, register, groq_configured):
    headers, _ = await register('alice')
    app.dependency_overrides[get_assistant] = lambda: ScriptedAssistant({'first': 'Sure.'})

    resp = await client.post('/api/chatbot', json={'message': 'Help', 'mode': 'qa'}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {'response': 'Sure.'}

    resp = await client.post('/api/chatbot', json={'message': 'Help', 'mode': 'poetry'}, headers=headers)
    assert resp.status_code == 400


async def test_chatbot_route_errors(client, register, monkeypatch):
    headers, _ = await register('alice')
    monkeypatch.setattr(settings, 'groq_api_key', '')
    monkeypatch.setattr(settings, 'anthropic_api_key', '')

    resp = await client.post('/api/chatbot', json={'message': 'Help'}, headers=headers)
    assert resp.status_code == 503

    monkeypatch.setattr(settings, 'groq_api_key', 'test-key')
    monkeypatch.setattr(settings, 'assistant_models', ['first'])
    app.dependency_overrides[get_assistant] = lambda: ScriptedAssistant({'first': RuntimeError('boom')})

    resp = await client.post('/api/chatbot', json={'message': 'Help'}, headers=headers)
    assert resp.status_code == 502
    assert resp.json()['detail'] == 'AI Error: boom'


async def test_chatbot_requires_auth(client):
    resp = await client.post('/api/chatbot', json={'message': 'Help'})
    assert resp.status_code in (401, 403)
