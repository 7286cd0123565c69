import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .llm.constants import LLMModels

load_dotenv()


@dataclass
class Config:
    port: int = 3001
    model_name: str = LLMModels.GPT_4O.value
    # Deadline for one upstream call and for a whole review request, in seconds
    timeout: float = 30.0
    rate_limit: int = 30
    rate_window: float = 60.0
    log_level: str = "INFO"
    # Sample abstracts are cut to this many characters in the benchmark prompt
    sample_chars: int = 400
    max_citation_candidates: int = 100
    max_critical_issues: int = 5

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config from PORT and PAPERPILOT_* environment variables."""
        defaults = cls()
        return cls(
            port=int(os.getenv("PORT", defaults.port)),
            model_name=os.getenv("PAPERPILOT_MODEL", defaults.model_name),
            timeout=float(os.getenv("PAPERPILOT_TIMEOUT", defaults.timeout)),
            rate_limit=int(os.getenv("PAPERPILOT_RATE_LIMIT", defaults.rate_limit)),
            rate_window=float(os.getenv("PAPERPILOT_RATE_WINDOW", defaults.rate_window)),
            log_level=os.getenv("PAPERPILOT_LOG_LEVEL", defaults.log_level).upper(),
        )
