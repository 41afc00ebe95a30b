"""Translation engine implementations.

This package contains concrete implementations of the TransInterface for the supported
translation services. Traditional machine translation services (Google Cloud, DeepL, Microsoft,
Baidu, Youdao, Tencent) and large language model services (OpenAI, Claude, Gemini) are covered.
Each class handles the communication with its external API, the request/response formats
and the mapping of provider errors onto the translation exception hierarchy.
"""

from core.trans.engines.trans_baidu import BaiduTranslation
from core.trans.engines.trans_claude import ClaudeTranslation
from core.trans.engines.trans_deepl import DeeplTranslation
from core.trans.engines.trans_gemini import GeminiTranslation
from core.trans.engines.trans_google import GoogleTranslation
from core.trans.engines.trans_microsoft import MicrosoftTranslation
from core.trans.engines.trans_openai import OpenAITranslation
from core.trans.engines.trans_tencent import TencentTranslation
from core.trans.engines.trans_youdao import YoudaoTranslation

__all__: list[str] = [
    "BaiduTranslation",
    "ClaudeTranslation",
    "DeeplTranslation",
    "GeminiTranslation",
    "GoogleTranslation",
    "MicrosoftTranslation",
    "OpenAITranslation",
    "TencentTranslation",
    "YoudaoTranslation",
]
