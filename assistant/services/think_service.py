"""
Multi-step reasoning on a single question. One completion call with an instruction to answer
in two labelled sections; the reply is split into reasoning and conclusion.
"""
import logging
import re

from assistant.errors import ValidationError
from assistant.models.enums import MessageRole
from assistant.services.capability_gateway import CapabilityGateway

logger = logging.getLogger(__name__)

THINK_SYSTEM_PROMPT = """You are a careful reasoning assistant.
Work through the user's question step by step before answering.

Reply in exactly this format:
Reasoning:
<numbered steps showing how you reach the answer>
Conclusion:
<the final answer in a few sentences>"""

_CONCLUSION_MARKER = re.compile(r"^\s*conclusion\s*:\s*", re.I | re.M)
_REASONING_MARKER = re.compile(r"^\s*reasoning\s*:\s*", re.I)


def split_reasoning(reply: str) -> tuple[str, str]:
    """
    Returns (reasoning, conclusion). Without a "Conclusion:" line the whole reply is
    the conclusion and the reasoning is empty.
    """
    match = _CONCLUSION_MARKER.search(reply)
    if match is None:
        return "", reply.strip()
    reasoning = _REASONING_MARKER.sub("", reply[: match.start()], count=1).strip()
    conclusion = reply[match.end():].strip()
    return reasoning, conclusion


class ThinkService:
    def __init__(self, gateway: CapabilityGateway):
        self._gateway = gateway

    def think(self, query: str, model_name: str, show_reasoning: bool = False) -> dict[str, str]:
        if not query or not query.strip():
            raise ValidationError("Query must not be empty")
        history = [
            {"role": MessageRole.SYSTEM.value, "content": THINK_SYSTEM_PROMPT},
            {"role": MessageRole.USER.value, "content": query},
        ]
        completion = self._gateway.complete(history, model_name)
        reasoning, conclusion = split_reasoning(completion.content)
        logger.debug("think(%s): %d reasoning chars", model_name, len(reasoning))
        return {
            "reasoning": reasoning if show_reasoning else "",
            "conclusion": conclusion,
        }
