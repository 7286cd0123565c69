"""PaperPilot: multi-reviewer paper review and academic writing assistance over LLM completions."""

__version__ = "1.4.0"
