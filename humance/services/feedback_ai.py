"""
Generated review feedback.

Turns the template items, the manager's item scores and private observations
into a feedback paragraph the manager can edit before submitting.
"""
import logging
from typing import Mapping, Optional, Sequence

from humance.core import prompts
from humance.core.config import settings
from humance.core.exceptions import AIError
from humance.services.ai_orchestrator import AIOrchestrator

logger = logging.getLogger(__name__)


def build_feedback_messages(
    items: Sequence[Mapping[str, str]],
    scores: Mapping[str, float],
    observations: Optional[str] = None,
):
    lines = []
    for index, item in enumerate(items):
        score = scores.get(str(index))
        if score is None:
            continue
        lines.append(f"- Critério: {item.get('text', '')} - Nota: {score:g}/10")

    observations_block = ""
    if observations and observations.strip():
        observations_block = prompts.get_prompt(
            prompts.REVIEW_FEEDBACK_OBSERVATIONS_TEMPLATE, observations=observations.strip()
        )

    return [
        {"role": "system", "content": prompts.REVIEW_FEEDBACK_SYSTEM},
        {
            "role": "user",
            "content": prompts.get_prompt(
                prompts.REVIEW_FEEDBACK_USER_TEMPLATE,
                items_block="\n".join(lines),
                observations_block=observations_block,
            ),
        },
    ]


def generate_review_feedback(
    items: Sequence[Mapping[str, str]],
    scores: Mapping[str, float],
    observations: Optional[str] = None,
) -> str:
    messages = build_feedback_messages(items, scores, observations)
    feedback = (AIOrchestrator.call_model(messages, temperature=settings.ai.temperature) or "").strip()
    if not feedback:
        logger.error("AI returned an empty feedback suggestion.")
        raise AIError("O assistente não retornou um feedback.")
    return feedback
