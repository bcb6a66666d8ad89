"""MinuteScribe - desktop client for audio transcription and meeting minutes"""

__version__ = "0.1.0"
