from paperpilot.agents.base import Agent
from paperpilot.llm.base import LLMClient
from paperpilot.prompts.roles import THEORIST


class ReviewerTheorist(Agent):
    role = THEORIST

    def __init__(self, llm: LLMClient):
        super().__init__(llm)
