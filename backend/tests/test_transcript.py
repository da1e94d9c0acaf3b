import pytest

from services.script_generation.transcript import (
    assign_scripts,
    compose_full_script,
    count_words,
    decode_transcript,
    split_transcript,
)
from shared.models import Slide


class TestDecodeTranscript:
    def test_strips_bom_and_normalizes_newlines(self):
        assert decode_transcript("\ufeffeen\r\ntwee\rdrie".encode()) == "een\ntwee\ndrie"

    def test_rejects_non_utf8(self):
        with pytest.raises(ValueError, match="UTF-8"):
            decode_transcript(b"\xff\xfe\x00bad")


class TestSplitTranscript:
    def test_header_markers(self):
        text = (
            "Voorwoord dat genegeerd wordt\n"
            "=== SLIDE 1: Intro ===\nWelkom allemaal.\n\n"
            "=== SLIDE 2: Agenda ===\nDit gaan we doen.\n"
        )
        assert split_transcript(text, 2) == ["Welkom allemaal.", "Dit gaan we doen."]

    def test_plain_slide_headers(self):
        text = "Slide 1\nEerste stuk\nSlide 2\nTweede stuk\nSlide 3\nDerde stuk"
        assert split_transcript(text, 3) == ["Eerste stuk", "Tweede stuk", "Derde stuk"]

    def test_extra_markers_are_ignored(self):
        text = "Slide 1\nA\nSlide 2\nB\nSlide 3\nC"
        assert split_transcript(text, 2) == ["A", "B"]

    def test_numbered_markers(self):
        text = "1. Eerste deel over 3.5 procent\n2. Tweede deel"
        assert split_transcript(text, 2) == ["Eerste deel over 3.5 procent", "Tweede deel"]

    def test_paragraphs(self):
        text = "Alinea een.\n\nAlinea twee.\n\n\nAlinea drie."
        assert split_transcript(text, 3) == ["Alinea een.", "Alinea twee.", "Alinea drie."]

    def test_even_word_split(self):
        assert split_transcript("a b c d e", 2) == ["a b c", "d e"]

    def test_short_text_pads_with_empty_sections(self):
        assert split_transcript("alleen", 3) == ["alleen", "", ""]

    def test_empty_text(self):
        assert split_transcript("", 2) == ["", ""]

    def test_invalid_slide_count(self):
        with pytest.raises(ValueError):
            split_transcript("tekst", 0)


def test_count_words():
    assert count_words("  een twee\ndrie  ") == 3
    assert count_words("") == 0


def test_compose_full_script():
    slides = [
        Slide(slide_number=1, title="Intro", script="Hallo."),
        Slide(slide_number=2, title="Einde", script=None),
    ]
    assert compose_full_script(slides) == "=== SLIDE 1: Intro ===\n\nHallo.\n\n\n=== SLIDE 2: Einde ===\n\n"


def test_assign_scripts_pads_missing():
    slides = [Slide(slide_number=1, title="A"), Slide(slide_number=2, title="B")]
    result = assign_scripts(slides, ["een"])

    assert [s.script for s in result] == ["een", ""]
    assert slides[0].script is None


def test_composed_script_splits_back():
    slides = [
        Slide(slide_number=1, title="Intro", script="Welkom bij de presentatie."),
        Slide(slide_number=2, title="Slot", script="Bedankt.\n\nVragen?"),
    ]
    assert split_transcript(compose_full_script(slides), 2) == ["Welkom bij de presentatie.", "Bedankt.\n\nVragen?"]
