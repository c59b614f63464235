"""
Study assistant.

Proxies summarize / explain / Q&A / recommend requests to a hosted LLM.
Groq is used when its key is configured, Anthropic otherwise. Each provider
has an ordered list of model names; every attempt is bounded by a timeout and
a failed, timed-out or empty attempt moves on to the next model.
"""
import asyncio
import logging

from edushare.config import settings

logger = logging.getLogger(__name__)

BASE_SYSTEM_PROMPT = (
    'You are EduShare AI, a smart and friendly academic assistant built for students. '
    'You summarize, explain, and answer questions related to academic content in simple '
    'and structured form.'
)

MODE_INSTRUCTIONS = {
    'summarize': (
        'Your task is to summarize academic notes or text clearly in short bullet points. '
        'Focus on key points and main ideas. Be concise and well-structured.'
    ),
    'explain': (
        'Your task is to explain topics or definitions in beginner-friendly language. '
        'Break down complex concepts into simple terms and use examples when helpful.'
    ),
    'qa': (
        'Your task is to answer study-related questions concisely with examples if possible. '
        'Provide clear, accurate, and helpful responses.'
    ),
    'recommend': (
        'Your task is to suggest relevant notes or resources. You cannot browse the EduShare '
        'library directly, so give general recommendations based on the topic and explain '
        'what types of resources would be helpful.'
    ),
}

VALID_MODES = tuple(MODE_INSTRUCTIONS)

PROVIDER_GROQ = 'groq'
PROVIDER_ANTHROPIC = 'anthropic'


class AssistantNotConfigured(Exception):
    """No provider API key is configured."""
    pass


class AssistantError(Exception):
    """Every model option failed. The message is safe to show to users."""
    pass


class InvalidAssistantRequest(ValueError):
    pass


def build_system_instruction(mode: str) -> str:
    return f'{BASE_SYSTEM_PROMPT}\n\n{MODE_INSTRUCTIONS.get(mode, MODE_INSTRUCTIONS["qa"])}'


def describe_failure(error: Exception | None, models: list[str]) -> str:
    """Turn the last provider error into a user-facing message."""
    if error is None:
        return 'All models failed. Please try again later.'

    text = str(error).lower()
    if 'api key' in text or 'api_key' in text or 'authentication' in text:
        return 'Invalid API key. Please check the assistant configuration.'
    if 'quota' in text or 'rate limit' in text or 'rate_limit' in text:
        return 'Rate limit exceeded. Please try again later.'
    if 'safety' in text:
        return 'The request was blocked due to safety filters. Please rephrase your message.'
    if 'not found' in text or 'invalid model' in text or '404' in text:
        return f'Model not available. Tried models: {", ".join(models)}.'
    if isinstance(error, asyncio.TimeoutError):
        return 'The assistant took too long to respond. Please try again.'
    return f'AI Error: {error}'


class AssistantService:
    """Sends one user message to the first model option that answers."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout if timeout is not None else settings.assistant_timeout_seconds

    def _provider(self) -> tuple[str, list[str]]:
        """Pick provider and its model options. Groq first (fast), then Anthropic."""
        if settings.groq_api_key:
            return PROVIDER_GROQ, list(settings.assistant_models)
        if settings.anthropic_api_key:
            return PROVIDER_ANTHROPIC, list(settings.assistant_fallback_models)
        raise AssistantNotConfigured('AI service is not properly configured. Please check your API key.')

    async def reply(self, message: str, mode: str = 'qa') -> str:
        """Answer `message` in the given mode.

        Raises InvalidAssistantRequest for bad input, AssistantNotConfigured
        when no key is set and AssistantError when every model failed.
        """
        user_message = (message or '').strip()
        if not user_message:
            raise InvalidAssistantRequest('Message is required')

        selected_mode = (mode or 'qa').lower()
        if selected_mode not in VALID_MODES:
            raise InvalidAssistantRequest(
                f'Invalid mode. Must be one of: {", ".join(VALID_MODES)}'
            )

        provider, models = self._provider()
        system = build_system_instruction(selected_mode)
        last_error: Exception | None = None

        for model in models:
            logger.info(
                'Assistant request: provider=%s model=%s mode=%s chars=%d',
                provider, model, selected_mode, len(user_message),
            )
            try:
                text = await asyncio.wait_for(
                    self._complete(provider, model, system, user_message),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as e:
                logger.warning('Model %s timed out after %ss', model, self.timeout)
                last_error = e
                continue
            except Exception as e:
                logger.warning('Model %s failed: %s', model, e)
                last_error = e
                continue

            text = (text or '').strip()
            if text:
                logger.info('Assistant answered with %s (%d chars)', model, len(text))
                return text
            last_error = AssistantError(f'Empty response from {model}')

        msg = describe_failure(last_error, models)
        logger.error('Assistant failed: %s', msg)
        raise AssistantError(msg)

    async def _complete(self, provider: str, model: str, system: str, message: str) -> str:
        if provider == PROVIDER_GROQ:
            return await self._call_groq(model, system, message)
        return await self._call_anthropic(model, system, message)

    async def _call_groq(self, model: str, system: str, message: str) -> str:
        """Use Groq (Llama and friends)."""
        from groq import AsyncGroq

        client = AsyncGroq(api_key=settings.groq_api_key)
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {'role': 'system', 'content': system},
                {'role': 'user', 'content': message},
            ],
            temperature=0.3,
            max_tokens=1024,
        )
        return response.choices[0].message.content or ''

    async def _call_anthropic(self, model: str, system: str, message: str) -> str:
        """Use Claude."""
        from anthropic import AsyncAnthropic

        client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        response = await client.messages.create(
            model=model,
            max_tokens=1024,
            system=system,
            messages=[{'role': 'user', 'content': message}],
        )
        return response.content[0].text if response.content else ''
