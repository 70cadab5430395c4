"""Unit tests for per-commit prompt building and parse-or-fallback."""

import json

import pytest

from commit_digest.domain.entities import ChangeType, CommitSummary, FileChange, Risk
from commit_digest.services.commit_summarizer import (
    FALLBACK_SUMMARY_TEXT,
    CommitSummarizer,
    build_commit_prompt,
    fallback_summary,
    parse_commit_summary,
    truncate,
)

from fakes import FakeLlm, make_commit

FILES = (
    FileChange("api/routes.py", "modified", 12, 4, 16, "@@ routes"),
    FileChange("api/models.py", "added", 30, 0, 30, "@@ models"),
    FileChange("logo.png", "added", 0, 0, 0, ""),
    FileChange("README.md", "modified", 1, 1, 2, "@@ readme"),
)

EXPECTED_FALLBACK = CommitSummary(
    summary=FALLBACK_SUMMARY_TEXT,
    change_type=ChangeType.OTHER,
    areas=(),
    risk=Risk.LOW,
    test_impact="N/A",
    notable_files=("api/routes.py", "api/models.py", "logo.png"),
)


class TestTruncate:
    def test_short_text_unchanged(self):
        assert truncate("abc", 10) == "abc"

    def test_long_text_cut_with_marker(self):
        out = truncate("x" * 5000, 4000)
        assert out.startswith("x" * 4000)
        assert out.endswith("...[truncated]...")
        assert out.count("x") == 4000

    def test_empty(self):
        assert truncate("", 10) == ""


class TestBuildCommitPrompt:
    def test_embeds_commit_metadata(self):
        commit = make_commit("abcdef1234567", message="Add routes\n\nLonger body")
        prompt = build_commit_prompt("octo/demo", commit, FILES)
        assert "Repository: octo/demo" in prompt
        assert "Commit: abcdef1 | Author: Ada | Date: 2025-01-10T12:00:00Z" in prompt
        assert "Title: Add routes" in prompt
        assert "Longer body" not in prompt
        assert "- api/routes.py (+12/-4)" in prompt
        assert "FILE: api/models.py (added, +30/-0)" in prompt
        assert "OUTPUT STRICT JSON" in prompt

    def test_truncates_each_patch_to_budget(self):
        big = FileChange("big.txt", "modified", 1, 1, 2, "y" * 10_000)
        prompt = build_commit_prompt("octo/demo", make_commit("a"), [big])
        assert "y" * 4000 in prompt
        assert "y" * 4001 not in prompt
        assert "...[truncated]..." in prompt

    def test_custom_budget(self):
        big = FileChange("big.txt", "modified", 1, 1, 2, "z" * 100)
        prompt = build_commit_prompt("octo/demo", make_commit("a"), [big], patch_budget=10)
        assert "z" * 11 not in prompt

    def test_no_files(self):
        prompt = build_commit_prompt("octo/demo", make_commit("a"), [])
        assert "(none)" in prompt
        assert "(no patch available)" in prompt


class TestParseCommitSummary:
    def test_well_formed_output(self):
        raw = json.dumps(
            {
                "summary": "Adds API routes.",
                "change_type": "feat",
                "areas": ["api", "models"],
                "risk": "medium",
                "test_impact": "New tests recommended.",
                "notable_files": ["a", "b", "c", "d"],
            }
        )
        result = parse_commit_summary(raw, FILES)
        assert result == CommitSummary(
            summary="Adds API routes.",
            change_type=ChangeType.FEAT,
            areas=("api", "models"),
            risk=Risk.MEDIUM,
            test_impact="New tests recommended.",
            notable_files=("a", "b", "c"),
        )

    def test_code_fences_are_stripped(self):
        raw = "```json\n" + json.dumps({"summary": "s", "change_type": "fix"}) + "\n```"
        result = parse_commit_summary(raw, FILES)
        assert result.change_type is ChangeType.FIX

    def test_enum_values_are_case_normalised(self):
        raw = json.dumps({"summary": "s", "change_type": " Docs ", "risk": "HIGH"})
        result = parse_commit_summary(raw, FILES)
        assert (result.change_type, result.risk) == (ChangeType.DOCS, Risk.HIGH)

    def test_list_summary_is_joined(self):
        raw = json.dumps({"summary": ["- one", "- two"], "change_type": "chore"})
        assert parse_commit_summary(raw, FILES).summary == "- one\n- two"

    def test_missing_optional_fields_default(self):
        result = parse_commit_summary(json.dumps({"summary": "s"}), FILES)
        assert result.areas == ()
        assert result.notable_files == ()
        assert result.change_type is ChangeType.OTHER
        assert result.risk is Risk.LOW

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            None,
            "   ",
            '{"summary": "truncated',
            "Sure! Here is the summary: it adds routes.",
            "[1, 2, 3]",
            '"just a string"',
            json.dumps({"title": "wrong keys"}),
            json.dumps({"summary": "s", "change_type": "feature"}),
            json.dumps({"summary": "s", "risk": "critical"}),
            json.dumps({"summary": "s", "areas": "api"}),
            json.dumps({"summary": 42}),
        ],
    )
    def test_unusable_output_yields_exact_fallback(self, raw):
        assert parse_commit_summary(raw, FILES) == EXPECTED_FALLBACK

    def test_fallback_with_fewer_than_three_files(self):
        assert fallback_summary(FILES[:1]).notable_files == ("api/routes.py",)
        assert fallback_summary(()).notable_files == ()


class TestCommitSummarizer:
    async def test_sends_prompt_with_temperature_for_regular_models(self):
        llm = FakeLlm(model="gpt-4o-mini")
        result = await CommitSummarizer(llm).summarize("octo/demo", make_commit("a"), FILES)
        assert result.change_type is ChangeType.FEAT
        prompt, kwargs = llm.calls[0]
        assert "Repository: octo/demo" in prompt
        assert kwargs == {"temperature": 0.2}

    @pytest.mark.parametrize("model", ["gpt-5-mini", "gpt-5o", "GPT-5"])
    async def test_omits_temperature_for_reasoning_models(self, model):
        llm = FakeLlm(model=model)
        await CommitSummarizer(llm).summarize("octo/demo", make_commit("a"), FILES)
        assert "temperature" not in llm.calls[0][1]

    async def test_malformed_model_output_never_raises(self):
        llm = FakeLlm(["not json at all"])
        result = await CommitSummarizer(llm).summarize("octo/demo", make_commit("a"), FILES)
        assert result == EXPECTED_FALLBACK
