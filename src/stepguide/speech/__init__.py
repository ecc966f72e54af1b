from .tts import SpeechOutput

__all__ = ["SpeechOutput"]
