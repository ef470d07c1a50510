from __future__ import annotations

from app.models.research import ResearchStep, ToolResult
from app.services.evidence import extract_source_urls, read_field, urls_from_payload


def _step(index: int, *outputs) -> ResearchStep:
    return ResearchStep(
        index=index,
        tool_results=[
            ToolResult(tool_call_id=f"call_{index}_{i}", tool_name="web_search", output=output)
            for i, output in enumerate(outputs)
        ],
    )


class TestReadField:
    def test_reads_matching_type_from_mapping(self):
        assert read_field({"url": "https://a.com"}, "url", str) == "https://a.com"

    def test_wrong_type_is_none(self):
        assert read_field({"url": 42}, "url", str) is None
        assert read_field({"results": "nope"}, "results", list) is None

    def test_missing_and_null_are_none(self):
        assert read_field({}, "url", str) is None
        assert read_field({"url": None}, "url", str) is None
        assert read_field(None, "url", str) is None

    def test_reads_attributes_from_objects(self):
        step = ResearchStep(index=0)
        assert read_field(step, "tool_results", list) == []

    def test_bool_is_not_an_int(self):
        assert read_field({"n": True}, "n", int) is None


def test_all_malformed_payloads_yield_no_urls():
    steps = [
        _step(
            0,
            None,
            "plain text",
            42,
            [],
            {},
            {"results": None},
            {"results": "https://not-a-list.com"},
            {"results": {"url": "https://dict-not-list.com"}},
        ),
        _step(
            1,
            {"results": [None, 3, "https://bare-string.com", [], {"url": None}, {"url": 7}, {"link": "https://x.com"}]},
            {"error": "rate limited"},
        ),
    ]

    assert extract_source_urls(steps) == []


def test_mixed_payloads_keep_order_and_duplicates():
    steps = [
        _step(0, {"results": [{"url": "https://a.com"}, {"url": None}, {"title": "no url"}]}),
        _step(1, None, {"results": [{"url": "https://b.com", "score": 0.4}, "junk"]}),
        _step(2, {"results": [{"url": "https://a.com"}]}, {"results": 5}),
    ]

    assert extract_source_urls(steps) == ["https://a.com", "https://b.com", "https://a.com"]


def test_urls_are_not_validated():
    assert urls_from_payload({"results": [{"url": "not a url"}, {"url": ""}]}) == ["not a url", ""]


def test_malformed_step_containers_are_skipped():
    assert extract_source_urls(None) == []
    assert extract_source_urls("steps") == []
    assert extract_source_urls([None, 1, {"tool_results": None}, {"tool_results": [None, "x"]}]) == []


def test_dict_shaped_steps_are_supported():
    steps = [{"tool_results": [{"output": {"results": [{"url": "https://c.com"}]}}]}]
    assert extract_source_urls(steps) == ["https://c.com"]


def test_steps_without_tool_results_yield_nothing():
    assert extract_source_urls([ResearchStep(index=0, text="just thinking")]) == []
