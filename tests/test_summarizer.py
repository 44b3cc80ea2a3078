import json

import pytest

from atio_search.summary.summarizer import BulletSummarizer
from fakes import FakeLLM


def test_returns_three_trimmed_bullets_and_strips_urls():
    llm = FakeLLM([json.dumps({"bullets": [" Solar dryer. ", "Helps fruit sellers.", "Cuts losses."]})])
    bullets = BulletSummarizer(llm_client=llm).summarize(
        "A solar dryer for mangoes, see https://example.org/dryer.", innovation_id=9
    )

    assert bullets == ["Solar dryer.", "Helps fruit sellers.", "Cuts losses."]
    assert "https://" not in llm.calls[0]["prompt"]
    assert llm.calls[0]["json_mode"] is True


@pytest.mark.parametrize(
    "reply",
    [
        json.dumps({"bullets": ["one", "two"]}),
        json.dumps({"bullets": ["one", "two", "  "]}),
        json.dumps(["one", "two", "three"]),
        "not json",
        RuntimeError("llm down"),
    ],
)
def test_bad_replies_give_none(reply):
    assert BulletSummarizer(llm_client=FakeLLM([reply])).summarize("Some description.") is None


def test_blank_text_skips_the_llm():
    llm = FakeLLM()
    assert BulletSummarizer(llm_client=llm).summarize("   ") is None
    assert llm.calls == []
