import logging

from paperpilot.llm.base import LLMClient
from paperpilot.llm.constants import TaskLLMConfigs
from paperpilot.parsing.extract import extract_json
from paperpilot.prompts.builder import build_prompt
from paperpilot.prompts.roles import ReviewerRole
from paperpilot.schemas import ReviewTask, ReviewerVerdict

logger = logging.getLogger(__name__)


class Agent:
    role: ReviewerRole = None

    def __init__(self, llm: LLMClient = None):
        self.llm = llm

    @property
    def name(self) -> str:
        return self.role.persona

    def review(self, task: ReviewTask) -> ReviewerVerdict:
        """Ask the model for this persona's verdict.

        Completion failures propagate as CompletionFailure; unparseable output
        becomes the neutral default verdict.
        """
        prompt = build_prompt(self.role, task)
        config = TaskLLMConfigs.REVIEWER
        response = self.llm.generate(prompt.user, system=prompt.system,
                                     temperature=config.temperature, max_tokens=config.max_tokens)
        data = extract_json(response, None)
        if data is None:
            logger.warning("%s returned no parseable verdict, using default", self.name)
        return ReviewerVerdict.from_payload(data)
