from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from core.trans.engines import trans_claude as trans_claude_module
from core.trans.interface import TranslateExceptionError
from models.config_models import AdapterConfig
from models.translation_models import TranslationOptions, TranslationRequest


def message(*texts: str, input_tokens: int = 1000, output_tokens: int = 2000) -> dict[str, Any]:
    return {
        "id": "msg_01",
        "type": "message",
        "model": "claude-3-sonnet-20240229",
        "content": [{"type": "text", "text": text} for text in texts],
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


def make_engine(response: Any = None, **config: Any) -> tuple[trans_claude_module.ClaudeTranslation, AsyncMock]:
    engine = trans_claude_module.ClaudeTranslation()
    engine.configure(AdapterConfig(api_key="sk-ant-test", retries=1, **config))
    post = AsyncMock(return_value=response)
    engine._requester.post = post
    return engine, post


@pytest.mark.parametrize(
    ("model", "expected"),
    [
        ("claude-3-opus-20240229", (1000 * 15 + 2000 * 75) / 1_000_000),
        ("claude-3-sonnet-20240229", (1000 * 3 + 2000 * 15) / 1_000_000),
        ("claude-3-haiku-20240307", (1000 * 0.25 + 2000 * 1.25) / 1_000_000),
        ("claude-unknown", (1000 * 3 + 2000 * 15) / 1_000_000),
    ],
)
def test_estimate_cost(model: str, expected: float) -> None:
    assert trans_claude_module.estimate_cost(model, 1000, 2000) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_translate_posts_messages_request() -> None:
    engine, post = make_engine(message("Bonjour", " le monde"))
    request = TranslationRequest(
        text="Hello world", source_lang="en", target_lang="fr", options=TranslationOptions(formality="informal")
    )

    response = await engine.translate(request)

    assert response.translated_text == "Bonjour le monde"
    assert response.provider == "claude"
    assert response.model == "claude-3-sonnet-20240229"
    assert response.usage is not None
    assert response.usage.tokens == 3000
    assert response.usage.cost == pytest.approx(0.033)
    args, kwargs = post.await_args
    assert args == ("https://api.anthropic.com/v1/messages",)
    assert kwargs["headers"] == {
        "x-api-key": "sk-ant-test",
        "anthropic-version": "2023-06-01",
        "content-type": "application/json",
    }
    body = kwargs["json_body"]
    assert body["model"] == trans_claude_module.DEFAULT_MODEL
    assert body["messages"] == [{"role": "user", "content": "Hello world"}]
    assert "casual" in body["system"]


@pytest.mark.asyncio
async def test_translate_skips_non_text_blocks() -> None:
    response_body = message("Hallo")
    response_body["content"].insert(0, {"type": "tool_use", "id": "t1"})
    engine, _ = make_engine(response_body, model="claude-3-haiku-20240307")

    response = await engine.translate(TranslationRequest(text="Hello", source_lang="en", target_lang="de"))

    assert response.translated_text == "Hallo"
    assert response.usage is not None
    assert response.usage.cost == pytest.approx((1000 * 0.25 + 2000 * 1.25) / 1_000_000)


@pytest.mark.asyncio
async def test_translate_malformed_reply_raises() -> None:
    engine, _ = make_engine({"type": "message"})

    with pytest.raises(TranslateExceptionError):
        await engine.translate(TranslationRequest(text="Hello", target_lang="de"))


@pytest.mark.asyncio
async def test_detect_language_uses_detection_model() -> None:
    engine, post = make_engine(message('{"language": "it", "confidence": 0.88}'))

    result = await engine.detect_language("Buongiorno")

    assert result.language == "it"
    assert result.confidence == 0.88
    assert post.await_args.kwargs["json_body"]["model"] == trans_claude_module.DETECTION_MODEL
