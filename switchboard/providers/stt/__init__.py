"""
Speech-to-Text Providers for Switchboard.

Available Providers:
- WhisperSTTProvider: OpenAI Whisper (openai SDK)
- DeepgramSTTProvider: Deepgram pre-recorded API (deepgram-sdk v3)
- GladiaSTTProvider: Gladia v2 upload/poll flow over httpx
- AssemblyAISTTProvider: AssemblyAI upload/poll flow over httpx
"""

from .assemblyai import AssemblyAISTTProvider
from .base import BaseSTTProvider, audio_filename, base_mime_type
from .deepgram import DeepgramSTTProvider
from .gladia import GladiaSTTProvider
from .whisper import WhisperSTTProvider

__all__ = [
    "AssemblyAISTTProvider",
    "BaseSTTProvider",
    "DeepgramSTTProvider",
    "GladiaSTTProvider",
    "WhisperSTTProvider",
    "audio_filename",
    "base_mime_type",
]
