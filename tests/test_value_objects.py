"""Unit tests for repository reference parsing."""

import pytest

from commit_digest.domain.exceptions import InvalidInputError, InvalidRepoFormatError
from commit_digest.domain.value_objects import RepoRef


class TestRepoRef:
    @pytest.mark.parametrize(
        "text",
        [
            "octo/demo",
            "  octo/demo  ",
            "https://github.com/octo/demo",
            "https://github.com/octo/demo.git",
            "git@github.com/octo/demo.git",
            "github.com/octo/demo/tree/main",
            "HTTPS://GitHub.com/octo/demo",
        ],
    )
    def test_accepts_short_form_and_urls(self, text):
        ref = RepoRef.from_string(text)
        assert (ref.owner, ref.name) == ("octo", "demo")
        assert ref.full_name == "octo/demo"

    @pytest.mark.parametrize("text", ["", "demo", "a/b/c", "https://gitlab.com/octo/demo", None])
    def test_rejects_other_input(self, text):
        with pytest.raises(InvalidRepoFormatError):
            RepoRef.from_string(text)

    def test_invalid_format_is_an_input_error(self):
        with pytest.raises(InvalidInputError):
            RepoRef.from_string("not a repo")

    def test_str_is_full_name(self):
        assert str(RepoRef(owner="psf", name="requests")) == "psf/requests"
