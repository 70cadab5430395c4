"""Unit tests for the period rollup prompt and generator."""

from commit_digest.domain.entities import Aggregate, CommitSummary, EnrichedCommit
from commit_digest.services.period_rollup import (
    EMPTY_ROLLUP,
    PeriodRollupGenerator,
    build_period_prompt,
)

from fakes import FakeLlm, make_commit

AGGREGATE = Aggregate(
    count=2,
    files=5,
    additions=40,
    deletions=7,
    type_counts={"feat": 1, "fix": 1},
    risk_counts={"low": 2},
    top_areas=["api", "ui"],
)


def _commits():
    return [
        EnrichedCommit(
            ref=make_commit(sha),
            files=(),
            additions=0,
            deletions=0,
            ai=CommitSummary(summary=text),
        )
        for sha, text in (("bbbbbbb999", "Fixes login."), ("aaaaaaa111", "Adds search."))
    ]


class TestBuildPeriodPrompt:
    def test_contains_aggregate_and_bullets_in_order(self):
        prompt = build_period_prompt("octo/demo", "S", "U", AGGREGATE, _commits())
        assert "Repository: octo/demo" in prompt
        assert "Window: S to U" in prompt
        assert "Commits: 2, Files changed: 5, LOC +40/-7" in prompt
        assert 'Change-type counts: {"feat": 1, "fix": 1}' in prompt
        assert 'Risk distribution: {"low": 2}' in prompt
        assert "Areas touched (top): api, ui" in prompt
        assert prompt.index("- bbbbbbb: Fixes login.") < prompt.index("- aaaaaaa: Adds search.")

    def test_lists_the_six_sections(self):
        prompt = build_period_prompt("octo/demo", "S", "U", AGGREGATE, [])
        for header in (
            "# Period Summary",
            "## Highlights",
            "## Potential Risks / Breaking Changes",
            "## Areas & Components Touched",
            "## Suggested Next Steps",
            "## Changelog (by commit)",
        ):
            assert header in prompt

    def test_no_areas(self):
        prompt = build_period_prompt("octo/demo", "S", "U", Aggregate(), [])
        assert "Areas touched (top): (n/a)" in prompt


class TestPeriodRollupGenerator:
    async def test_returns_raw_model_text(self):
        llm = FakeLlm(["# Period Summary\nAll good."])
        text = await PeriodRollupGenerator(llm).generate("octo/demo", "S", "U", AGGREGATE, [])
        assert text == "# Period Summary\nAll good."
        assert llm.calls[0][1] == {"temperature": 0.2}

    async def test_empty_output_becomes_placeholder(self):
        llm = FakeLlm(["   "])
        text = await PeriodRollupGenerator(llm).generate("octo/demo", "S", "U", AGGREGATE, [])
        assert text == EMPTY_ROLLUP == "# Period Summary\n(No content)"

    async def test_reasoning_model_omits_temperature(self):
        llm = FakeLlm(["ok"], model="gpt-5-mini")
        await PeriodRollupGenerator(llm).generate("octo/demo", "S", "U", AGGREGATE, [])
        assert llm.calls[0][1] == {}
