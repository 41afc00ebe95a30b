"""Speech synthesis provider implementations.

Modules:
- YoudaoSpeech: Implementation for the Youdao text-to-speech API.
"""

from core.tts.engines.youdao_tts import YoudaoSpeech

__all__: list[str] = ["YoudaoSpeech"]
