"""
TTS Fallback Manager

Handles provider fallback chains and degraded mode operation for TTS services.
Provides automatic fallback when the preferred TTS provider fails or reaches
its quota.
"""

import time
from typing import Any

from shared.utils import setup_logging

from .drivers.base import TTSEngine
from .errors import TTSProviderError

logger = setup_logging("tts-fallback")

# Cloud providers first, the on-device engine as last resort.
PROVIDER_PRIORITY = ["gemini", "openai", "local"]


class TTSFallbackManager:
    """Manages TTS provider fallback chains and degraded mode operation."""

    def __init__(self, drivers: dict[str, TTSEngine], default_driver: str = "gemini"):
        self.drivers = drivers
        self.default_driver = default_driver
        self.fallback_chain = self._build_fallback_chain()
        self.disabled_drivers: set[str] = set()  # Drivers temporarily disabled due to failures
        self.manually_disabled: set[str] = set()
        self.last_failure_time: dict[str, float] = {}

    def _build_fallback_chain(self) -> list[str]:
        """Build prioritized fallback chain for TTS providers."""
        chain = [name for name in PROVIDER_PRIORITY if name in self.drivers]
        chain.extend(name for name in self.drivers if name not in chain)
        logger.info(f"TTS fallback chain: {chain}")
        return chain

    def _attempt_order(self, preferred: str, allow_fallback: bool) -> list[str]:
        """Drivers to try for one request; each appears at most once."""
        order = [preferred] if preferred in self.drivers else []
        if allow_fallback:
            order.extend(name for name in self.fallback_chain if name != preferred)
        order = [name for name in order if name not in self.manually_disabled]

        enabled = [name for name in order if name not in self.disabled_drivers]
        # Degraded mode: with every driver failed, give each one another try.
        return enabled or order

    async def synthesize_with_fallback(
        self,
        text: str,
        voice: str | None = None,
        speed: float = 1.0,
        pitch: float = 0,
        output_format: str = "wav",
        language: str | None = None,
        preferred_driver: str | None = None,
        allow_fallback: bool = True,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Synthesize speech with automatic provider fallback.

        Args:
            text: Text to synthesize
            voice: Voice to use, the driver default when None
            speed: Speech speed
            pitch: Pitch adjustment
            output_format: Output format
            language: Language code
            preferred_driver: Preferred TTS driver (if None, uses default)
            allow_fallback: Try the rest of the chain when the preferred driver fails
            **kwargs: Additional parameters (e.g. emotion)

        Returns:
            Dictionary with synthesis results and provider information

        Raises:
            TTSProviderError: Every attempted provider failed.
        """
        driver_to_try = preferred_driver or self.default_driver
        if driver_to_try not in self.drivers and not allow_fallback:
            raise TTSProviderError(f"TTS driver '{driver_to_try}' is not available", provider=driver_to_try)

        attempted: list[str] = []
        failures: list[TTSProviderError] = []
        for driver_name in self._attempt_order(driver_to_try, allow_fallback):
            attempted.append(driver_name)
            if driver_name != driver_to_try:
                logger.info(f"Attempting fallback driver: {driver_name}")
            try:
                result = await self._synthesize_with_driver(
                    driver_name, text, voice, speed, pitch, output_format, language, **kwargs
                )
            except TTSProviderError as e:
                logger.warning(f"Driver {driver_name} failed: {e.message}")
                failures.append(e)
                continue
            except Exception as e:
                logger.warning(f"Driver {driver_name} failed: {e}")
                failures.append(TTSProviderError(str(e), provider=driver_name))
                continue

            result["provider_used"] = driver_name
            result["fallback_used"] = driver_name != driver_to_try
            if result["fallback_used"]:
                result["original_preferred"] = driver_to_try
            logger.info(f"Successfully synthesized using {driver_name} driver")
            return result

        raise self._exhausted_error(driver_to_try, attempted, failures)

    def _exhausted_error(
        self, preferred: str, attempted: list[str], failures: list[TTSProviderError]
    ) -> TTSProviderError:
        if not attempted:
            return TTSProviderError(
                f"No TTS provider available (preferred: {preferred}). "
                f"Disabled drivers: {sorted(self.disabled_drivers | self.manually_disabled)}",
                provider=preferred,
                suggestion="Enable a TTS driver or configure provider credentials",
            )

        details = "; ".join(f"{error.provider or name}: {error.message}" for name, error in zip(attempted, failures))
        quota_exceeded = any(error.quota_exceeded for error in failures)
        untried = [name for name in self.drivers if name not in attempted]
        if quota_exceeded:
            suggestion = "Provider quota exhausted; switch to another TTS provider or try again later"
        elif untried:
            suggestion = f"Switch to another TTS provider: {', '.join(untried)}"
        else:
            suggestion = next((error.suggestion for error in failures if error.suggestion), None) or (
                "Check provider credentials or use the local speech engine"
            )
        return TTSProviderError(
            f"All TTS providers failed. Attempted: {attempted}. {details}",
            provider=attempted[-1] if len(attempted) == 1 else ",".join(attempted),
            quota_exceeded=quota_exceeded,
            suggestion=suggestion,
        )

    async def _synthesize_with_driver(
        self,
        driver_name: str,
        text: str,
        voice: str | None,
        speed: float,
        pitch: float,
        output_format: str,
        language: str | None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Synthesize with a specific driver and add timing."""
        start_time = time.time()

        try:
            driver = self.drivers[driver_name]
            result = await driver.synthesize(
                text=text,
                voice=voice,
                speed=speed,
                pitch=pitch,
                output_format=output_format,
                language=language,
                **kwargs,
            )
        except Exception:
            self._mark_driver_failed(driver_name)
            raise

        result["processing_time"] = time.time() - start_time
        result["driver_name"] = driver_name

        # Clear failure status on success
        if driver_name in self.disabled_drivers:
            self.disabled_drivers.remove(driver_name)
            logger.info(f"Re-enabled driver {driver_name} after successful synthesis")

        return result

    def _mark_driver_failed(self, driver_name: str) -> None:
        """Mark a driver as failed until a later success or a manual enable."""
        self.last_failure_time[driver_name] = time.time()

        if driver_name not in self.disabled_drivers:
            self.disabled_drivers.add(driver_name)
            logger.warning(f"Temporarily disabled TTS driver {driver_name} due to failure")

    def is_driver_available(self, driver_name: str) -> bool:
        """Check if a driver is currently available."""
        return (
            driver_name in self.drivers
            and driver_name not in self.disabled_drivers
            and driver_name not in self.manually_disabled
        )

    def get_available_drivers(self) -> list[str]:
        """Get list of currently available drivers."""
        return [d for d in self.drivers if self.is_driver_available(d)]

    def manually_disable_driver(self, driver_name: str, reason: str = "manual") -> None:
        """Manually disable a driver (for maintenance, etc.)."""
        if driver_name in self.drivers:
            self.manually_disabled.add(driver_name)
            self.last_failure_time[driver_name] = time.time()
            logger.info(f"Manually disabled TTS driver {driver_name}: {reason}")

    def manually_enable_driver(self, driver_name: str) -> None:
        """Manually re-enable a disabled driver."""
        self.manually_disabled.discard(driver_name)
        self.disabled_drivers.discard(driver_name)
        self.last_failure_time.pop(driver_name, None)
        logger.info(f"Manually re-enabled TTS driver {driver_name}")
