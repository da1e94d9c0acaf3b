import json

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from shared.enums import ScriptLength, ScriptStyle, SpeechEmotion


class Slide(BaseModel):
    """A slide as seen by the narration pipeline.

    Accepts both ``slide_number`` and the browser client's ``slideNumber``.
    """

    model_config = ConfigDict(populate_by_name=True)

    slide_number: int = Field(..., ge=1, alias="slideNumber", description="1-based slide position")
    title: str = Field(default="", description="Slide title")
    content: str = Field(default="", description="Body text of the slide")
    notes: str | None = Field(default=None, description="Speaker notes already present in the deck")
    script: str | None = Field(default=None, description="Narration script for the slide")


_SLIDE_LIST = TypeAdapter(list[Slide])


def parse_slides_json(raw: str) -> list[Slide]:
    """Parse a JSON array of slides sent as a multipart form field.

    Raises:
        ValueError: The field is not valid JSON or not a list of slides.
    """
    try:
        return _SLIDE_LIST.validate_python(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid slides payload: {e}") from e


class SlideExtractionResponse(BaseModel):
    slides: list[Slide]
    total_slides: int
    file_name: str | None = None


# Script generation
class ScriptGenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slides: list[Slide] = Field(..., min_length=1)
    style: ScriptStyle = Field(default=ScriptStyle.EDUCATIONAL)
    length: ScriptLength = Field(default=ScriptLength.CONCISE)
    informal_address: bool = Field(
        default=True,
        alias="useTutoyeren",
        description="Address the audience informally (je/jij instead of u)",
    )
    language: str | None = Field(default=None, description="Script language, defaults to configuration")
    driver: str | None = Field(default=None, description="Preferred script generation driver")


class ScriptGenerationResponse(BaseModel):
    slides: list[Slide]
    scripts: list[str]
    full_script: str
    driver_used: str
    processing_time: float


class TranscriptParseResponse(BaseModel):
    slides: list[Slide]
    full_script: str
    word_count: int


# Speech synthesis
class TTSRequest(BaseModel):
    text: str = Field(..., max_length=5000, description="Text to convert to speech")
    voice: str | None = Field(default=None, description="Voice to use, driver default when omitted")
    emotion: SpeechEmotion = Field(default=SpeechEmotion.NEUTRAL, description="Delivery style")
    speed: float = Field(default=1.0, ge=0.25, le=4.0, description="Speech speed")
    pitch: float = Field(default=0, ge=-50, le=50, description="Pitch adjustment")
    output_format: str = Field(default="wav", description="Output audio format")
    language: str | None = Field(default=None, description="Language code")
    driver: str | None = Field(default=None, description="Preferred TTS driver identifier")


class TTSResponse(BaseModel):
    success: bool = True
    audio_base64: str
    mime_type: str
    voice_used: str
    output_format: str
    provider_used: str
    fallback_used: bool = False
    emotion: SpeechEmotion = SpeechEmotion.NEUTRAL
    text_length: int
    processing_time: float


class AudioSettings(BaseModel):
    driver: str | None = Field(default=None, description="Preferred TTS driver identifier")
    voice: str | None = Field(default=None, description="Voice to use")
    emotion: SpeechEmotion = Field(default=SpeechEmotion.NEUTRAL)
    speed: float = Field(default=1.0, ge=0.25, le=4.0)
    output_format: str = Field(default="wav")
    language: str | None = None
    pacing_seconds: float | None = Field(
        default=None, ge=0.0, le=60.0, description="Pause between provider calls, configuration default when omitted"
    )


class AudioBundleRequest(BaseModel):
    slides: list[Slide] = Field(..., min_length=1)
    settings: AudioSettings = Field(default_factory=AudioSettings)


class SlideAudio(BaseModel):
    slide_number: int
    title: str
    audio_data: bytes
    mime_type: str
    output_format: str
    provider_used: str
    voice_used: str


class SlideAudioError(BaseModel):
    slide_number: int
    message: str
    provider: str | None = None
    quota_exceeded: bool = False


class SlideAudioBatch(BaseModel):
    results: list[SlideAudio] = Field(default_factory=list)
    errors: list[SlideAudioError] = Field(default_factory=list)
    skipped: list[int] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.results


# Exports
class ExportRequest(BaseModel):
    slides: list[Slide] = Field(..., min_length=1)
    file_name: str | None = Field(default=None, description="Name of the uploaded deck")
