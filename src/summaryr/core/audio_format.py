"""Audio container detection by magic bytes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioFormat:
    """A container format Whisper accepts."""

    name: str
    mime_type: str
    extension: str


WAV = AudioFormat("wav", "audio/wav", "wav")
MP3 = AudioFormat("mp3", "audio/mpeg", "mp3")
OGG = AudioFormat("ogg", "audio/ogg", "ogg")
WEBM = AudioFormat("webm", "video/webm", "webm")
MP4 = AudioFormat("mp4", "video/mp4", "mp4")

EBML_MAGIC = b"\x1a\x45\xdf\xa3"


def sniff_audio_format(data: bytes) -> AudioFormat | None:
    """Identify the container from the first bytes of data.

    Returns:
        The detected AudioFormat, or None when the header is unknown or
        shorter than four bytes.
    """
    if len(data) < 4:
        return None

    header = data[:4]

    if header == b"RIFF":
        return WAV
    if header == EBML_MAGIC:
        return WEBM
    if header[0] == 0xFF and header[1] in (0xFB, 0xF3):
        return MP3
    if header == b"OggS":
        return OGG
    # ISO base media files start with a 32-bit box size, small for ftyp
    if header[:3] == b"\x00\x00\x00":
        return MP4

    return None
