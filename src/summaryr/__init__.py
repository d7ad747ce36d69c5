"""Study-platform backend: transcription, document extraction and study material generation."""

__version__ = "0.1.0"
