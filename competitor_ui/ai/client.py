"""Claude API client wrapper for UI scoring."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import anthropic

from competitor_ui.errors import ConfigError
from competitor_ui.models.config import API_KEY_ENV, DEFAULT_MODEL

logger = logging.getLogger(__name__)


class AIClient:
    """Wrapper around the Anthropic Claude API."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4096,
        timeout: float = 60.0,
        debug_dir: Path | None = None,
    ):
        if not api_key:
            raise ConfigError(
                f"{API_KEY_ENV} is not set. "
                "Set it before running an analysis."
            )
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
        self.model = model
        self.max_tokens = max_tokens
        self.debug_dir = debug_dir
        self._call_count = 0

    @property
    def call_count(self) -> int:
        return self._call_count

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        max_tokens: Optional[int] = None,
        temperature: float = 0.2,
    ) -> str:
        """Send a text-only request to Claude and return the text response."""
        return self._send(
            system_prompt,
            [{"type": "text", "text": user_message}],
            log_message=user_message,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    def complete_with_image(
        self,
        system_prompt: str,
        user_message: str,
        image_base64: str,
        media_type: str = "image/png",
        max_tokens: Optional[int] = None,
        temperature: float = 0.2,
    ) -> str:
        """Send one image plus instructions to Claude and return the text response."""
        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": media_type,
                    "data": image_base64,
                },
            },
            {"type": "text", "text": user_message},
        ]
        return self._send(
            system_prompt,
            content,
            log_message=f"[IMAGE ATTACHED]\n{user_message}",
            max_tokens=max_tokens,
            temperature=temperature,
        )

    def _send(
        self,
        system_prompt: str,
        content: list[dict],
        log_message: str,
        max_tokens: Optional[int],
        temperature: float,
    ) -> str:
        self._call_count += 1
        tokens = max_tokens or self.max_tokens
        logger.info(
            "Calling AI (call #%d, model=%s, max_tokens=%d)...",
            self._call_count, self.model, tokens,
        )

        try:
            call_start = time.time()
            response = self.client.messages.create(
                model=self.model,
                max_tokens=tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": content}],
            )
            text = "".join(
                getattr(block, "text", "") for block in response.content
            )
            logger.info("AI response received in %.1fs (%d chars)",
                        time.time() - call_start, len(text))

            if response.stop_reason == "max_tokens":
                logger.warning(
                    "AI response was truncated at max_tokens=%d; JSON may be incomplete",
                    tokens,
                )

            self._save_exchange_log(system_prompt, log_message, text, error=None)
            return text
        except anthropic.APIError as e:
            logger.error("Claude API error: %s", e)
            self._save_exchange_log(system_prompt, log_message, "", error=str(e))
            raise

    def _save_exchange_log(
        self,
        system_prompt: str,
        user_message: str,
        response_text: str,
        error: str | None,
    ) -> None:
        """Save the full AI exchange (prompt + response) to the debug directory."""
        if self.debug_dir is None:
            return
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            ts = time.strftime("%Y%m%d_%H%M%S")
            log_file = self.debug_dir / f"ai_call_{ts}_{self._call_count:03d}.log"

            with open(log_file, "w", encoding="utf-8") as f:
                f.write(f"=== AI CALL #{self._call_count} at {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")
                f.write(f"=== SYSTEM PROMPT ({len(system_prompt)} chars) ===\n")
                f.write(system_prompt)
                f.write(f"\n\n=== USER MESSAGE ({len(user_message)} chars) ===\n")
                f.write(user_message)
                f.write(f"\n\n=== RESPONSE ({len(response_text)} chars) ===\n")
                f.write(response_text if response_text else "(empty)")
                if error:
                    f.write(f"\n\n=== ERROR ===\n{error}\n")

            logger.debug("AI exchange logged to %s", log_file)
        except OSError as log_err:
            logger.debug("Failed to save AI exchange log: %s", log_err)
