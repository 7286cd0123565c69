import json
import threading
import time

import pytest

from paperpilot.config import Config

SECTIONS = {"abstract": "A", "introduction": "B", "method": "C", "results": "D"}

# System-prompt markers that identify which call a prompt belongs to
CALL_MARKERS = [
    ("Reviewer A", "theorist"),
    ("Reviewer B", "experimentalist"),
    ("Reviewer C", "impact_assessor"),
    ("comparing research papers", "benchmark"),
]


def verdict_json(score, strengths=None, weaknesses=None, comment="ok", fenced=True):
    body = json.dumps({
        "score": score,
        "strengths": strengths or [],
        "weaknesses": weaknesses or [],
        "comment": comment,
    })
    return f"```json\n{body}\n```" if fenced else body


class Slow:
    """Reply that arrives after `seconds`."""

    def __init__(self, seconds, reply):
        self.seconds = seconds
        self.reply = reply

    def __call__(self):
        time.sleep(self.seconds)
        return self.reply


class FakeLLM:
    """Completion client double keyed by call kind; records every call."""

    def __init__(self, replies=None, default="{}"):
        self.replies = replies or {}
        self.default = default
        self.calls = []
        self._lock = threading.Lock()

    @staticmethod
    def kind(system):
        for marker, kind in CALL_MARKERS:
            if system and marker in system:
                return kind
        return "other"

    def calls_of(self, kind):
        return [call for call in self.calls if call["kind"] == kind]

    def generate(self, prompt, system=None, temperature=0.2, max_tokens=None, **kwargs):
        kind = self.kind(system)
        with self._lock:
            self.calls.append({"kind": kind, "prompt": prompt, "system": system,
                               "temperature": temperature, "max_tokens": max_tokens})
        reply = self.replies.get(kind, self.default)
        if callable(reply) and not isinstance(reply, type):
            reply = reply()
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def config():
    return Config(timeout=5.0)


@pytest.fixture
def sections():
    return dict(SECTIONS)
