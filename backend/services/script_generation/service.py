import json
import re
import time
from collections.abc import Callable

from shared.config import config
from shared.models import ScriptGenerationRequest, ScriptGenerationResponse
from shared.utils import setup_logging

from .drivers import GeminiScriptDriver, OpenAIScriptDriver, ScriptGenerationDriver
from .errors import ScriptGenerationError
from .prompts import DEFAULT_LENGTH_WORDS, build_system_prompt, build_user_prompt
from .transcript import assign_scripts, compose_full_script

logger = setup_logging("script-generation")

DRIVER_FACTORIES: dict[str, Callable[[], ScriptGenerationDriver]] = {
    "openai": OpenAIScriptDriver,
    "gemini": GeminiScriptDriver,
}

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_scripts_payload(raw: str, expected: int) -> list[str]:
    """Read ``{"scripts": [...]}`` (or a bare list) from a model answer.

    The result always has ``expected`` entries: missing ones become empty
    strings and surplus ones are dropped.
    """
    cleaned = _CODE_FENCE.sub("", raw.strip())
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ScriptGenerationError(f"Model answer is not valid JSON: {e.msg}") from e

    if isinstance(payload, dict):
        payload = payload.get("scripts")
    if not isinstance(payload, list):
        raise ScriptGenerationError('Model answer has no "scripts" list')

    scripts: list[str] = []
    for item in payload[:expected]:
        if isinstance(item, dict):
            item = item.get("script", "")
        scripts.append(str(item).strip() if item is not None else "")
    scripts.extend([""] * (expected - len(scripts)))
    return scripts


class ScriptGenerationService:
    """Generate narration scripts for a list of slides through an LLM driver."""

    def __init__(self, drivers: dict[str, ScriptGenerationDriver] | None = None, default_driver: str | None = None):
        self._drivers: dict[str, ScriptGenerationDriver] = dict(drivers or {})
        self.default_driver = default_driver or config.get("script_default_driver", "openai")

    @property
    def available_drivers(self) -> list[str]:
        return sorted(set(DRIVER_FACTORIES) | set(self._drivers))

    def get_driver(self, name: str) -> ScriptGenerationDriver:
        """Return the driver registered as ``name``, creating it on first use."""
        if name in self._drivers:
            return self._drivers[name]
        factory = DRIVER_FACTORIES.get(name)
        if factory is None:
            raise ValueError(f"Script generation driver '{name}' not found")
        try:
            driver = factory()
        except ValueError as e:
            other = next((d for d in self.available_drivers if d != name), None)
            raise ScriptGenerationError(
                str(e),
                provider=name,
                suggestion=f"Configure credentials for '{name}' or use the '{other}' driver" if other else None,
            ) from e
        self._drivers[name] = driver
        logger.info(f"Initialized script generation driver: {name}")
        return driver

    def _driver_settings(self, driver_name: str) -> dict:
        return {
            "model": config.get_pipeline_value(f"script_generation.models.{driver_name}"),
            "temperature": config.get_pipeline_value("script_generation.temperature", 0.7),
            "max_tokens": config.get_pipeline_value("script_generation.max_tokens", 4000),
        }

    async def generate(self, request: ScriptGenerationRequest) -> ScriptGenerationResponse:
        start_time = time.time()
        driver_name = request.driver or self.default_driver
        driver = self.get_driver(driver_name)

        language = request.language or config.get_pipeline_value("script_generation.language", "nl")
        target_words = int(
            config.get_pipeline_value(
                f"script_generation.length_words.{request.length.value}", DEFAULT_LENGTH_WORDS[request.length]
            )
        )
        system_prompt = build_system_prompt(
            request.style, request.length, request.informal_address, language, target_words
        )
        user_prompt = build_user_prompt(request.slides)
        settings = {k: v for k, v in self._driver_settings(driver_name).items() if v is not None}

        logger.info(
            f"Generating {len(request.slides)} scripts with {driver_name} "
            f"(style={request.style.value}, length={request.length.value}, language={language})"
        )
        raw = await driver.generate(system_prompt, user_prompt, settings)
        try:
            scripts = parse_scripts_payload(raw, len(request.slides))
        except ScriptGenerationError as e:
            e.provider = driver_name
            raise

        slides = assign_scripts(request.slides, scripts)
        return ScriptGenerationResponse(
            slides=slides,
            scripts=scripts,
            full_script=compose_full_script(slides),
            driver_used=driver_name,
            processing_time=time.time() - start_time,
        )
