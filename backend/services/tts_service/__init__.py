"""Speech synthesis for slide narration."""
