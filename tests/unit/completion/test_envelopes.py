"""Unit tests for proxy envelope decoding.

Covers the precedence order of streamed payload shapes and the one-shot
body reduction.
"""

from scribe.completion.envelopes import (
    BareDeltaText,
    BareOutputText,
    ContentDelta,
    OutputTextDelta,
    ResponseCompleted,
    Unrecognized,
    decode_envelope,
    extract_one_shot_text,
)


class TestDecodeEnvelope:
    """decode_envelope() picks the first matching shape."""

    def test_output_text_delta(self):
        env = decode_envelope({"type": "response.output_text.delta", "delta": {"text": "Hel"}})
        assert env == OutputTextDelta("Hel")
        assert env.fragments() == ["Hel"]

    def test_output_text_delta_with_empty_text_falls_through(self):
        """An empty delta.text is not a match; with no content list nothing else applies."""
        env = decode_envelope({"type": "response.output_text.delta", "delta": {"text": ""}})
        assert isinstance(env, Unrecognized)
        assert env.fragments() == []

    def test_content_delta_yields_every_part_in_order(self):
        env = decode_envelope(
            {
                "type": "response.message.delta",
                "delta": {
                    "content": [
                        {"type": "output_text", "text": "A"},
                        {"type": "other", "text": "B"},
                        {"text": ""},
                        {"type": "output_text"},
                        "not-a-part",
                        {"text": "C"},
                    ]
                },
            }
        )
        assert env == ContentDelta(("A", "B", "C"))
        assert env.fragments() == ["A", "B", "C"]

    def test_content_delta_consumes_line_even_when_empty(self):
        """A .delta event with a content list never falls back to output_text."""
        env = decode_envelope(
            {"type": "x.delta", "delta": {"content": []}, "output_text": "ignored"}
        )
        assert env == ContentDelta(())
        assert env.fragments() == []

    def test_response_completed_with_text(self):
        env = decode_envelope({"type": "response.completed", "output_text": "Done."})
        assert env == ResponseCompleted("Done.")
        assert env.fragments() == ["Done."]

    def test_response_completed_without_text(self):
        env = decode_envelope({"type": "response.completed", "output_text": ""})
        assert env == ResponseCompleted(None)
        assert env.fragments() == []

    def test_unknown_type_falls_back_to_output_text(self):
        env = decode_envelope({"type": "response.created", "output_text": "hi"})
        assert env == BareOutputText("hi")

    def test_bare_output_text(self):
        assert decode_envelope({"output_text": "hi"}) == BareOutputText("hi")

    def test_bare_delta_text(self):
        assert decode_envelope({"delta": {"text": "lo"}}) == BareDeltaText("lo")

    def test_output_text_takes_precedence_over_delta_text(self):
        env = decode_envelope({"output_text": "first", "delta": {"text": "second"}})
        assert env == BareOutputText("first")

    def test_non_string_type_is_ignored(self):
        env = decode_envelope({"type": 3, "delta": {"text": "x"}})
        assert env == BareDeltaText("x")

    def test_unrecognized(self):
        payload = {"type": "response.in_progress", "response": {}}
        env = decode_envelope(payload)
        assert env == Unrecognized(payload)
        assert env.fragments() == []


class TestExtractOneShotText:
    """extract_one_shot_text() reduces a JSON body to one string."""

    def test_output_text_verbatim(self):
        assert extract_one_shot_text({"output_text": "Hi there"}) == "Hi there"

    def test_empty_output_text_is_used(self):
        assert extract_one_shot_text({"output_text": "", "output": [{"content": [{"text": "x"}]}]}) == ""

    def test_output_content_concatenated(self):
        body = {"output": [{"content": [{"type": "output_text", "text": "A"}, {"text": "B"}]}]}
        assert extract_one_shot_text(body) == "AB"

    def test_only_first_output_item_is_read(self):
        body = {"output": [{"content": [{"text": "A"}]}, {"content": [{"text": "B"}]}]}
        assert extract_one_shot_text(body) == "A"

    def test_parts_without_text_are_skipped(self):
        body = {"output": [{"content": [{"type": "refusal"}, {"text": "ok"}]}]}
        assert extract_one_shot_text(body) == "ok"

    def test_unknown_shapes_give_empty_string(self):
        assert extract_one_shot_text({}) == ""
        assert extract_one_shot_text({"output": []}) == ""
        assert extract_one_shot_text({"output": [{"content": "nope"}]}) == ""
        assert extract_one_shot_text(None) == ""
        assert extract_one_shot_text(["output_text"]) == ""
