import json
import logging
from typing import Dict, List

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from humance.core.config import settings
from humance.core.exceptions import AIError, AIKillSwitchError
from humance.core.logging import request_id_var

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


class AIOrchestrator:
    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type((requests.exceptions.RequestException, AIError)),
        reraise=True
    )
    def _do_call(
        messages: List[Dict[str, str]],
        model_name: str,
        temperature: float = 0.7
    ) -> str:
        """Internal method to perform the actual API call with retries."""
        logger.info(f"Calling AI Model: {model_name}")

        try:
            response = requests.post(
                url=OPENROUTER_URL,
                headers={
                    "Authorization": f"Bearer {settings.ai.openrouter_api_key}",
                    "Content-Type": "application/json",
                    "X-Request-ID": request_id_var.get(),
                },
                data=json.dumps({
                    "model": model_name,
                    "messages": messages,
                    "temperature": temperature
                }),
                timeout=30
            )
            response.raise_for_status()
            return response.json()["choices"][0]["message"]["content"]

        except requests.exceptions.Timeout:
            logger.error("AI service timeout.")
            raise AIError("AI service reached timeout limit.")
        except requests.exceptions.HTTPError as e:
            logger.error(f"AI service HTTP error: {e}")
            raise AIError(f"AI service returned error: {e.response.status_code}")
        except (KeyError, IndexError, ValueError) as e:
            logger.exception("Malformed AI response.")
            raise AIError(f"AI service error: {str(e)}")

    @classmethod
    def call_model(
        cls,
        messages: List[Dict[str, str]],
        temperature: float = 0.7
    ) -> str:
        """
        Centralized AI model caller with kill-switch, retries and fallback model.
        """
        if settings.ai.kill_switch:
            logger.warning("AI Kill-switch is active. Blocking request.")
            raise AIKillSwitchError()

        if not settings.ai.openrouter_api_key:
            logger.error("OpenRouter API Key missing.")
            raise AIError("AI service configuration error.")

        try:
            return cls._do_call(messages, settings.ai.model_name, temperature)
        except (requests.exceptions.RequestException, AIError) as e:
            logger.warning(f"Primary model {settings.ai.model_name} failed: {e}. Attempting fallback.")
            try:
                return cls._do_call(messages, settings.ai_fallback_model, temperature)
            except (requests.exceptions.RequestException, AIError) as fe:
                logger.error(f"Fallback model {settings.ai_fallback_model} also failed: {fe}")
                raise AIError("AI service completely unavailable.")
