"""
Guidance generation client.

Asks the language-generation backend for an explanation followed by a
``CAD_PROMPT:`` line, and splits the reply into explanation text and a
visualization directive. The public call never raises: any failure yields
a degraded ``GuidanceResult``.
"""

import asyncio
import logging
import os
import re
from typing import Optional, Tuple

import litellm
from litellm import acompletion

from mentor.config.config_manager import ConfigManager
from mentor.guidance.prompts import (
    DEGRADED_EXPLANATION,
    DIRECTIVE_MARKER,
    GENERATION_PARAMS,
    GUIDANCE_MODEL,
    SAFETY_SETTINGS,
    render_instruction,
    synthesize_directive,
)
from mentor.models.domain import (
    GuidanceResult,
    MalformedUpstreamResponseError,
    Query,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

# Drop unsupported params instead of erroring
litellm.drop_params = True
os.environ.setdefault("LITELLM_LOG", "ERROR")

GUIDANCE_TIMEOUT_SECONDS = 20.0

_MARKER_LINE = re.compile(
    r"^[^\n]*?" + re.escape(DIRECTIVE_MARKER) + r"[ \t]*([^\n]*)$",
    re.IGNORECASE | re.MULTILINE,
)


def extract_directive(raw_text: str, query_text: str) -> Tuple[str, str]:
    """Split generated text into ``(explanation, directive)``.

    The first line containing the marker supplies the directive (the
    trimmed rest of that line) and is removed from the explanation. With no
    marker, or nothing after it, the directive is synthesized from the query.
    """
    match = _MARKER_LINE.search(raw_text)
    if match is None:
        return raw_text.strip(), synthesize_directive(query_text)

    directive = match.group(1).strip()
    explanation = (raw_text[: match.start()] + raw_text[match.end():]).strip()
    if not directive:
        directive = synthesize_directive(query_text)
    return explanation, directive


def degraded_guidance(query_text: str) -> GuidanceResult:
    return GuidanceResult(
        explanation=DEGRADED_EXPLANATION,
        visualization_directive=synthesize_directive(query_text),
    )


class GuidanceClient:
    """Wrapper around the language-generation backend, called through LiteLLM."""

    def __init__(self, config_manager: ConfigManager, timeout: float = GUIDANCE_TIMEOUT_SECONDS):
        self.config_manager = config_manager
        self.timeout = timeout

    async def _complete(self, instruction: str) -> str:
        settings = self.config_manager.app_settings
        kwargs = dict(GENERATION_PARAMS)
        kwargs["safety_settings"] = SAFETY_SETTINGS
        if settings.gemini_api_key:
            kwargs["api_key"] = settings.gemini_api_key

        logger.info(f"Calling LLM: {GUIDANCE_MODEL}")
        try:
            response = await asyncio.wait_for(
                acompletion(
                    model=GUIDANCE_MODEL,
                    messages=[{"role": "user", "content": instruction}],
                    timeout=self.timeout,
                    **kwargs,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailableError(f"Guidance backend timed out after {self.timeout}s") from e
        except Exception as e:
            # LiteLLM maps provider failures onto many exception types
            raise UpstreamUnavailableError(f"Guidance backend call failed: {e}") from e

        try:
            content: Optional[str] = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedUpstreamResponseError("Guidance backend returned no choices") from e
        if not content or not content.strip():
            raise MalformedUpstreamResponseError("Guidance backend returned an empty body")

        logger.info(f"LLM response received: {len(content)} characters")
        return content

    async def generate_guidance(self, query: Query) -> GuidanceResult:
        """Produce an explanation and a visualization directive for ``query``."""
        try:
            raw_text = await self._complete(render_instruction(query.text))
            explanation, directive = extract_directive(raw_text, query.text)
            if not explanation:
                raise MalformedUpstreamResponseError("Generated text has no explanation")
            return GuidanceResult(explanation=explanation, visualization_directive=directive)
        except (UpstreamUnavailableError, MalformedUpstreamResponseError) as e:
            logger.error(f"Gemini error ({e.kind.value}): {e}", exc_info=True)
        except Exception as e:
            logger.error(f"Unexpected error generating guidance: {e}", exc_info=True)
        return degraded_guidance(query.text)
