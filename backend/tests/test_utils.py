from shared.utils import config, content_disposition, derive_download_name, sanitize_filename, slugify_title


def test_config_env_loading() -> None:
    # Keys should resolve even when not explicitly configured
    assert config.get("openai_api_key") in (None, "") or isinstance(config.get("openai_api_key"), str)
    assert config.get("local_tts_api_base").startswith("http")
    allowed_origins = config.get("allowed_origins")
    assert isinstance(allowed_origins, list)


def test_pipeline_values() -> None:
    assert config.get_pipeline_value("notes.language") == "nl-NL"
    assert config.get_pipeline_value("script_generation.length_words.standard") == 100
    assert config.get_pipeline_value("notes.missing", "fallback") == "fallback"


def test_pipeline_env_override(monkeypatch) -> None:
    monkeypatch.setenv("PIPELINE_FLAG_NOTES_CROSS_REFERENCE_PRESENTATION", "true")
    monkeypatch.setenv("PIPELINE_FLAG_TTS_PACING_SECONDS", "2.5")
    assert config.get_pipeline_value("notes.cross_reference_presentation", False) is True
    assert config.get_pipeline_value("tts.pacing_seconds", 1.0) == 2.5


def test_sanitize_filename() -> None:
    fname = "bad:file/name?.mp3"
    safe = sanitize_filename(fname)
    assert ":" not in safe and "/" not in safe and "?" not in safe


def test_slugify_title() -> None:
    assert slugify_title("Q3: Omzet & winst") == "Q3__Omzet___winst"


def test_derive_download_name() -> None:
    assert derive_download_name("Kwartaal cijfers.pptx", "_script.txt", "x.txt") == "Kwartaal cijfers_script.txt"
    assert derive_download_name("../../etc/deck.pptx", "_with_notes.pptx", "x") == "deck_with_notes.pptx"
    assert derive_download_name(None, "_script.txt", "presentation_script.txt") == "presentation_script.txt"


def test_content_disposition_non_ascii() -> None:
    header = content_disposition("Présentation.pptx")
    assert header.startswith('attachment; filename="Prsentation.pptx"')
    assert "filename*=UTF-8''Pr%C3%A9sentation.pptx" in header
