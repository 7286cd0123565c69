from .base import Agent
from ..llm.base import LLMClient
from ..prompts.roles import IMPACT_ASSESSOR


class ReviewerImpact(Agent):
    role = IMPACT_ASSESSOR

    def __init__(self, llm: LLMClient):
        super().__init__(llm)
