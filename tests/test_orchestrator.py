import json
import time

import pytest

from paperpilot.config import Config
from paperpilot.errors import TaskValidationError, UpstreamError, UpstreamRateLimited, UpstreamTimeout
from paperpilot.llm.base import CompletionError, CompletionRateLimited, CompletionTimeout
from paperpilot.orchestrator import ReviewOrchestrator
from paperpilot.schemas import ReviewTask, ReviewerVerdict

from conftest import FakeLLM, Slow, verdict_json

DEFAULT = ReviewerVerdict()


def all_reviewers(reply):
    return {"theorist": reply, "experimentalist": reply, "impact_assessor": reply}


def test_all_reviewers_score_eight(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(8)))
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})

    assert outcome.overall_score == 8.0
    assert outcome.recommendation == "strong_accept"
    assert outcome.accept_probability == 83
    assert outcome.comparative_benchmark is None
    assert len(llm.calls) == 3
    assert {call["kind"] for call in llm.calls} == {"theorist", "experimentalist", "impact_assessor"}


def test_accepts_validated_task(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(6)))
    outcome = ReviewOrchestrator(llm, config).review(ReviewTask.from_payload({"sections": sections}))
    assert outcome.overall_score == 6.0


def test_reviewer_calls_use_review_generation_settings(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(7)))
    ReviewOrchestrator(llm, config).review({"sections": sections})
    assert all(call["max_tokens"] == 600 for call in llm.calls)


def test_one_failed_reviewer_degrades_to_default(config, sections):
    llm = FakeLLM({
        "theorist": verdict_json(8, weaknesses=["t1"]),
        "experimentalist": CompletionError("boom"),
        "impact_assessor": verdict_json(8, strengths=["useful"]),
    })
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})

    theorist, experimentalist, impact = outcome.reviewer_scores
    assert experimentalist.persona == "Experimentalist"
    assert (experimentalist.score, experimentalist.strengths, experimentalist.weaknesses,
            experimentalist.detailed_comment) == (DEFAULT.score, [], [], "")
    assert theorist.score == 8 and theorist.weaknesses == ["t1"]
    assert impact.strengths == ["useful"]
    assert outcome.overall_score == 7.0
    assert outcome.recommendation == "weak_accept"
    assert [issue.id for issue in outcome.critical_issues] == ["issue_a0"]


def test_unexpected_exception_in_one_reviewer_is_absorbed(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(6)))
    llm.replies["impact_assessor"] = RuntimeError("socket closed")
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})
    assert outcome.reviewer_scores[2].score == 5


def test_unparseable_reply_degrades_to_default(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(9)))
    llm.replies["theorist"] = "I think this paper is great, 9/10"
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})
    assert outcome.reviewer_scores[0].score == 5
    assert outcome.reviewer_scores[1].score == 9


def test_partial_verdict_fields_get_defaults(config, sections):
    llm = FakeLLM(all_reviewers('{"score": "7"}'))
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})
    assert outcome.overall_score == 7.0
    assert outcome.reviewer_scores[0].strengths == []
    assert outcome.reviewer_scores[0].detailed_comment == ""


def test_out_of_range_scores_are_clamped(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(14)))
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})
    assert outcome.overall_score == 10.0


def test_critical_issues_take_four_theorist_then_one_experimentalist(config, sections):
    llm = FakeLLM({
        "theorist": verdict_json(6, weaknesses=["t1", "t2", "t3", "t4"]),
        "experimentalist": verdict_json(6, weaknesses=["e1", "e2", "e3"]),
        "impact_assessor": verdict_json(6, weaknesses=["i1", "i2"]),
    })
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})
    assert [issue.issue for issue in outcome.critical_issues] == ["t1", "t2", "t3", "t4", "e1"]


def test_results_keep_role_order_regardless_of_completion_order(config, sections):
    llm = FakeLLM({
        "theorist": Slow(0.3, verdict_json(9)),
        "experimentalist": Slow(0.1, verdict_json(6)),
        "impact_assessor": verdict_json(3),
    })
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections})
    assert [(r.persona, r.score) for r in outcome.reviewer_scores] == [
        ("Theorist", 9), ("Experimentalist", 6), ("Impact_Assessor", 3)]


def test_reviewers_run_concurrently(config, sections):
    llm = FakeLLM(all_reviewers(Slow(0.4, verdict_json(7))))
    started = time.monotonic()
    ReviewOrchestrator(llm, config).review({"sections": sections})
    assert time.monotonic() - started < 1.0


def test_missing_method_is_rejected_before_any_call(config, sections):
    del sections["method"]
    llm = FakeLLM(all_reviewers(verdict_json(8)))
    with pytest.raises(TaskValidationError) as excinfo:
        ReviewOrchestrator(llm, config).review({"sections": sections})
    assert "method" in excinfo.value.details
    assert llm.calls == []


@pytest.mark.parametrize("payload", [
    None,
    [],
    {},
    {"sections": "abstract only"},
    {"sections": {"abstract": "A", "introduction": "", "method": "C", "results": "D"}},
    {"sections": {"abstract": "A", "introduction": "B", "method": 3, "results": "D"}},
])
def test_malformed_tasks_are_rejected(config, payload):
    llm = FakeLLM()
    with pytest.raises(TaskValidationError):
        ReviewOrchestrator(llm, config).review(payload)
    assert llm.calls == []


def test_all_reviewers_failing_propagates(config, sections):
    llm = FakeLLM(all_reviewers(CompletionError("upstream 502")))
    with pytest.raises(UpstreamError) as excinfo:
        ReviewOrchestrator(llm, config).review({"sections": sections})
    assert excinfo.value.status_code == 500
    assert excinfo.value.details == "upstream 502"


def test_all_reviewers_rate_limited(config, sections):
    llm = FakeLLM(all_reviewers(CompletionRateLimited("429")))
    with pytest.raises(UpstreamRateLimited):
        ReviewOrchestrator(llm, config).review({"sections": sections})


def test_all_reviewers_timing_out_upstream(config, sections):
    llm = FakeLLM(all_reviewers(CompletionTimeout("read timeout")))
    with pytest.raises(UpstreamTimeout):
        ReviewOrchestrator(llm, config).review({"sections": sections})


def test_overall_deadline_raises_timeout_without_waiting(sections):
    llm = FakeLLM(all_reviewers(verdict_json(8)))
    llm.replies["experimentalist"] = Slow(2.0, verdict_json(8))
    orchestrator = ReviewOrchestrator(llm, Config(timeout=0.2))

    started = time.monotonic()
    with pytest.raises(UpstreamTimeout) as excinfo:
        orchestrator.review({"sections": sections})
    assert time.monotonic() - started < 1.5
    assert excinfo.value.status_code == 504


def test_benchmark_runs_when_samples_given(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(7)))
    llm.replies["benchmark"] = ('```json\n{"yourNoveltyScore": 6, "acceptedAvgNovelty": 7.5, '
                                '"yourRigorScore": 5, "acceptedAvgRigor": 7, '
                                '"keyGaps": ["no ablation"], "strengths": ["broader scope"]}\n```')
    outcome = ReviewOrchestrator(llm, config).review({
        "sections": sections,
        "acceptedSamples": [{"abstract": "accepted abstract"}],
        "rejectedSamples": ["rejected abstract"],
    })

    assert len(llm.calls_of("benchmark")) == 1
    body = outcome.to_response()["comparativeBenchmark"]
    assert body["acceptedAvgNovelty"] == 7.5
    assert body["keyGaps"] == ["no ablation"]
    assert outcome.overall_score == 7.0


def test_no_benchmark_call_without_samples(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(7)))
    ReviewOrchestrator(llm, config).review({"sections": sections, "acceptedSamples": []})
    assert llm.calls_of("benchmark") == []


@pytest.mark.parametrize("reply", [CompletionError("benchmark down"), "garbage", "[1, 2]"])
def test_benchmark_failure_is_omitted(config, sections, reply):
    llm = FakeLLM(all_reviewers(verdict_json(7)))
    llm.replies["benchmark"] = reply
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections, "rejectedSamples": ["r"]})
    assert outcome.comparative_benchmark is None
    assert outcome.overall_score == 7.0


def test_benchmark_infinity_scores_become_null(config, sections):
    llm = FakeLLM(all_reviewers(verdict_json(7)))
    llm.replies["benchmark"] = '{"yourNoveltyScore": Infinity, "keyGaps": ["g"]}'
    outcome = ReviewOrchestrator(llm, config).review({"sections": sections, "acceptedSamples": ["a"]})

    body = outcome.to_response()
    assert body["comparativeBenchmark"]["yourNoveltyScore"] is None
    assert body["comparativeBenchmark"]["keyGaps"] == ["g"]
    assert body["overallScore"] == 7.0
    json.dumps(body, allow_nan=False)


def test_slow_benchmark_does_not_fail_review(sections):
    llm = FakeLLM(all_reviewers(verdict_json(7)))
    llm.replies["benchmark"] = Slow(2.0, "{}")
    started = time.monotonic()
    outcome = ReviewOrchestrator(llm, Config(timeout=0.3)).review({"sections": sections, "acceptedSamples": ["a"]})
    assert outcome.comparative_benchmark is None
    assert outcome.recommendation == "weak_accept"
    assert time.monotonic() - started < 1.5


def test_same_upstream_output_gives_same_outcome(config, sections):
    replies = {
        "theorist": verdict_json(7, weaknesses=["w"]),
        "experimentalist": verdict_json(6),
        "impact_assessor": verdict_json(8),
    }
    first = ReviewOrchestrator(FakeLLM(dict(replies)), config).review({"sections": sections})
    second = ReviewOrchestrator(FakeLLM(dict(replies)), config).review({"sections": sections})
    assert first.to_response() == second.to_response()
