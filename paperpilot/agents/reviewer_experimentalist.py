from paperpilot.agents.base import Agent
from paperpilot.llm.base import LLMClient
from paperpilot.prompts.roles import EXPERIMENTALIST


class ReviewerExperimentalist(Agent):
    role = EXPERIMENTALIST

    def __init__(self, llm: LLMClient):
        super().__init__(llm)
