import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from services.script_generation import service as script_service_module
from services.script_generation.drivers import OpenAIScriptDriver, ScriptGenerationDriver
from services.script_generation.errors import ScriptGenerationError
from services.script_generation.prompts import build_system_prompt, build_user_prompt, language_name
from services.script_generation.service import ScriptGenerationService, parse_scripts_payload
from shared.enums import ScriptLength, ScriptStyle
from shared.models import ScriptGenerationRequest, Slide


class DummyScriptDriver(ScriptGenerationDriver):
    name = "dummy"

    def __init__(self, answer: str):
        self.answer = answer
        self.calls: list[tuple[str, str, dict]] = []

    async def generate(self, system_prompt, user_prompt, settings):
        self.calls.append((system_prompt, user_prompt, settings))
        return self.answer


def _slides(count: int) -> list[Slide]:
    return [Slide(slide_number=n, title=f"Titel {n}", content=f"Inhoud {n}") for n in range(1, count + 1)]


class TestParseScriptsPayload:
    def test_object_with_scripts(self):
        assert parse_scripts_payload('{"scripts": ["een", " twee "]}', 2) == ["een", "twee"]

    def test_bare_list_in_code_fence(self):
        raw = '```json\n["een", "twee"]\n```'
        assert parse_scripts_payload(raw, 2) == ["een", "twee"]

    def test_list_of_objects(self):
        raw = json.dumps({"scripts": [{"script": "een"}, {"script": "twee"}]})
        assert parse_scripts_payload(raw, 2) == ["een", "twee"]

    def test_pads_and_truncates(self):
        assert parse_scripts_payload('{"scripts": ["een"]}', 3) == ["een", "", ""]
        assert parse_scripts_payload('{"scripts": ["een", "twee", "drie"]}', 2) == ["een", "twee"]

    def test_invalid_json(self):
        with pytest.raises(ScriptGenerationError, match="not valid JSON"):
            parse_scripts_payload("Sorry, I can't help", 1)

    def test_missing_scripts_key(self):
        with pytest.raises(ScriptGenerationError, match="scripts"):
            parse_scripts_payload('{"text": "hallo"}', 1)


class TestPrompts:
    def test_system_prompt_mentions_settings(self):
        prompt = build_system_prompt(ScriptStyle.PROFESSIONAL, ScriptLength.STANDARD, False, "nl", 100)

        assert "Dutch" in prompt
        assert "30-45 seconds" in prompt
        assert "about 100 words" in prompt
        assert "formally" in prompt
        assert '{"scripts"' in prompt

    def test_informal_address(self):
        prompt = build_system_prompt(ScriptStyle.CASUAL, ScriptLength.CONCISE, True, "en-US", 60)
        assert "informally" in prompt
        assert "English" in prompt

    def test_unknown_language_kept_as_is(self):
        assert language_name("pt") == "pt"

    def test_user_prompt_lists_slides(self):
        slides = _slides(2)
        slides[1] = slides[1].model_copy(update={"notes": "Vergeet de demo niet"})

        prompt = build_user_prompt(slides)

        assert "these 2 slides" in prompt
        assert "Slide 1: Titel 1" in prompt
        assert "Inhoud 2" in prompt
        assert "Existing speaker notes:\nVergeet de demo niet" in prompt


class TestScriptGenerationService:
    @pytest.mark.asyncio
    async def test_generate_assigns_scripts(self):
        driver = DummyScriptDriver('{"scripts": ["Welkom.", "Tot ziens."]}')
        service = ScriptGenerationService(drivers={"dummy": driver}, default_driver="dummy")

        response = await service.generate(ScriptGenerationRequest(slides=_slides(2)))

        assert response.scripts == ["Welkom.", "Tot ziens."]
        assert [s.script for s in response.slides] == ["Welkom.", "Tot ziens."]
        assert response.driver_used == "dummy"
        assert response.full_script.startswith("=== SLIDE 1: Titel 1 ===\n\nWelkom.")

    @pytest.mark.asyncio
    async def test_settings_come_from_configuration(self):
        driver = DummyScriptDriver('{"scripts": ["x"]}')
        service = ScriptGenerationService(drivers={"openai": driver}, default_driver="openai")

        await service.generate(ScriptGenerationRequest(slides=_slides(1), length=ScriptLength.EXTENDED))

        system_prompt, _, settings = driver.calls[0]
        assert settings == {"model": "gpt-4o-mini", "temperature": 0.7, "max_tokens": 4000}
        assert "about 140 words" in system_prompt
        assert "Dutch" in system_prompt

    @pytest.mark.asyncio
    async def test_request_accepts_browser_alias(self):
        driver = DummyScriptDriver('{"scripts": ["x"]}')
        service = ScriptGenerationService(drivers={"dummy": driver}, default_driver="dummy")
        request = ScriptGenerationRequest.model_validate(
            {"slides": [{"slideNumber": 1, "title": "A"}], "useTutoyeren": False}
        )

        await service.generate(request)

        assert "formally" in driver.calls[0][0]

    @pytest.mark.asyncio
    async def test_bad_answer_names_provider(self):
        service = ScriptGenerationService(drivers={"dummy": DummyScriptDriver("no json")}, default_driver="dummy")

        with pytest.raises(ScriptGenerationError) as exc_info:
            await service.generate(ScriptGenerationRequest(slides=_slides(1)))
        assert exc_info.value.provider == "dummy"

    def test_unknown_driver(self):
        with pytest.raises(ValueError, match="not found"):
            ScriptGenerationService().get_driver("nonexistent")

    def test_missing_credentials_become_provider_error(self, monkeypatch):
        def failing_factory():
            raise ValueError("OpenAI API key not configured")

        monkeypatch.setitem(script_service_module.DRIVER_FACTORIES, "openai", failing_factory)
        with pytest.raises(ScriptGenerationError) as exc_info:
            ScriptGenerationService().get_driver("openai")

        assert exc_info.value.provider == "openai"
        assert "gemini" in exc_info.value.suggestion

    def test_available_drivers(self):
        service = ScriptGenerationService(drivers={"dummy": DummyScriptDriver("")})
        assert service.available_drivers == ["dummy", "gemini", "openai"]


class TestOpenAIScriptDriver:
    def _driver(self, create: AsyncMock) -> OpenAIScriptDriver:
        driver = OpenAIScriptDriver.__new__(OpenAIScriptDriver)
        driver.client = MagicMock()
        driver.client.chat.completions.create = create
        return driver

    @pytest.mark.asyncio
    async def test_returns_message_content(self):
        response = MagicMock()
        response.choices = [MagicMock(message=MagicMock(content='  {"scripts": []}  '))]
        create = AsyncMock(return_value=response)

        result = await self._driver(create).generate("sys", "user", {"model": "gpt-4o-mini"})

        assert result == '{"scripts": []}'
        kwargs = create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0] == {"role": "system", "content": "sys"}

    @pytest.mark.asyncio
    async def test_rate_limit_flags_quota(self):
        error = openai.RateLimitError(
            "You exceeded your current quota",
            response=httpx.Response(429, request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")),
            body=None,
        )
        driver = self._driver(AsyncMock(side_effect=error))

        with pytest.raises(ScriptGenerationError) as exc_info:
            await driver.generate("sys", "user", {})

        assert exc_info.value.quota_exceeded is True
        assert exc_info.value.provider == "openai"
