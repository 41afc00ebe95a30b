"""Models for translation-related data.

Defines the request/response shapes exchanged between the manager and the provider adapters,
and the descriptive metadata each provider publishes about itself.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

__all__: list[str] = [
    "AlternativeTranslation",
    "BillingUnit",
    "FormalityOption",
    "Language",
    "LanguageDetectionResult",
    "PricingInfo",
    "PricingModel",
    "ProviderCategory",
    "ProviderFeature",
    "ProviderInfo",
    "QuotaInfo",
    "RateLimitInfo",
    "TranslationOptions",
    "TranslationRequest",
    "TranslationResponse",
    "UsageInfo",
    "ValidationResult",
]

type FormalityOption = Literal["formal", "informal", "default"]
type ProviderCategory = Literal["traditional", "ai", "local"]
type PricingModel = Literal["free", "freemium", "paid", "usage-based"]
type BillingUnit = Literal["character", "token", "request"]

AUTO_DETECT: str = "auto"


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class TranslationOptions(DataClassJsonMixin):
    """Optional hints attached to a translation request.

    Attributes:
        formality (str): Requested register ('formal', 'informal' or 'default').
        context (str | None): Free text describing where the text appears.
        domain (str | None): Subject domain (e.g. 'medical', 'legal').
        glossary (dict[str, str]): Fixed term translations to honour.
        preserve_formatting (bool): Ask the provider to keep whitespace and markup.
        preferred_provider (str | None): Provider id to try first.
    """

    formality: str = "default"
    context: str | None = None
    domain: str | None = None
    glossary: dict[str, str] = field(default_factory=dict)
    preserve_formatting: bool = False
    preferred_provider: str | None = None


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class TranslationRequest(DataClassJsonMixin):
    """A single translation request. Immutable once constructed.

    Attributes:
        text (str): Text to translate. Must not be empty.
        target_lang (str): Target language code.
        source_lang (str): Source language code, or 'auto' to let the provider detect it.
        options (TranslationOptions): Optional hints.

    Raises:
        ValueError: If text or target_lang is empty.
    """

    text: str
    target_lang: str
    source_lang: str = AUTO_DETECT
    options: TranslationOptions = field(default_factory=TranslationOptions)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text:
            msg = "Translation text must be a non-empty string"
            raise ValueError(msg)
        if not self.target_lang:
            msg = "Target language must be specified"
            raise ValueError(msg)
        if not self.source_lang:
            object.__setattr__(self, "source_lang", AUTO_DETECT)

    @property
    def language_pair(self) -> str:
        return f"{self.source_lang}-{self.target_lang}"


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class UsageInfo(DataClassJsonMixin):
    characters: int | None = None
    tokens: int | None = None
    cost: float | None = None


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class AlternativeTranslation(DataClassJsonMixin):
    text: str
    confidence: float | None = None


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class TranslationResponse(DataClassJsonMixin):
    """Result of a translation. Never mutated after creation.

    A cache hit is returned as a copy (``dataclasses.replace``) with ``cached`` set to True.

    Attributes:
        translated_text (str): The translated text.
        provider (str): Id of the provider that actually served the request.
        timestamp (float): Creation time in epoch seconds.
        detected_source_language (str | None): Language detected by the provider, if reported.
        confidence (float | None): Provider confidence, if reported.
        alternatives (list[AlternativeTranslation]): Alternative renderings, if any.
        model (str | None): Model name for AI providers.
        usage (UsageInfo | None): Characters, tokens and cost consumed.
        cached (bool): True when the response came from the cache.
    """

    translated_text: str
    provider: str
    timestamp: float = field(default_factory=time.time)
    detected_source_language: str | None = None
    confidence: float | None = None
    alternatives: list[AlternativeTranslation] = field(default_factory=list)
    model: str | None = None
    usage: UsageInfo | None = None
    cached: bool = False


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class LanguageDetectionResult(DataClassJsonMixin):
    """Result of language detection.

    Attributes:
        language (str): Detected language code.
        confidence (float): Confidence between 0.0 and 1.0.
        alternatives (list[dict[str, Any]]): Other candidate languages reported by the provider.
    """

    language: str
    confidence: float = 0.0
    alternatives: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    native_name: str


@dataclass(frozen=True)
class ProviderFeature:
    name: str
    description: str
    available: bool = True


@dataclass(frozen=True)
class PricingInfo:
    """Pricing summary for a provider.

    Attributes:
        model (PricingModel): Billing model.
        billing_unit (BillingUnit): Unit that is billed.
        free_quota (str | None): Human readable free allowance.
        paid_pricing (str | None): Human readable paid pricing.
        details (str | None): Additional notes.
    """

    model: PricingModel
    billing_unit: BillingUnit
    free_quota: str | None = None
    paid_pricing: str | None = None
    details: str | None = None


@dataclass(frozen=True)
class RateLimitInfo:
    requests_per_second: int | None = None
    requests_per_minute: int | None = None
    characters_per_request: int | None = None
    characters_per_month: int | None = None


@dataclass(frozen=True)
class ProviderInfo:
    """Descriptive metadata published by a provider adapter.

    Created once per adapter class and never modified.

    Attributes:
        id (str): Unique provider identifier.
        name (str): Short name.
        display_name (str): Name for display.
        description (str): One-line description.
        category (ProviderCategory): 'traditional', 'ai' or 'local'.
        supported_languages (tuple[Language, ...]): Languages the provider accepts.
        features (tuple[ProviderFeature, ...]): Optional capabilities.
        requires_api_key (bool): Whether an API key is mandatory.
        requires_api_secret (bool): Whether an API secret is mandatory.
        pricing (PricingInfo): Pricing summary.
        rate_limit (RateLimitInfo | None): Documented rate limits.
        homepage (str): Provider homepage URL.
        documentation (str): API documentation URL.
    """

    id: str
    name: str
    display_name: str
    description: str
    category: ProviderCategory
    supported_languages: tuple[Language, ...]
    features: tuple[ProviderFeature, ...]
    requires_api_key: bool
    requires_api_secret: bool
    pricing: PricingInfo
    rate_limit: RateLimitInfo | None = None
    homepage: str = ""
    documentation: str = ""

    @property
    def language_codes(self) -> frozenset[str]:
        return frozenset(lang.code for lang in self.supported_languages)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class ValidationResult(DataClassJsonMixin):
    valid: bool
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class QuotaInfo(DataClassJsonMixin):
    """Provider quota status.

    Attributes:
        used (int): Units consumed in the current period.
        limit (int): Units available in the current period.
        unit (str): Unit of the figures ('characters', 'tokens', ...).
        reset_at (float | None): Epoch seconds when the quota resets, if known.
    """

    used: int = 0
    limit: int = 0
    unit: str = "characters"
    reset_at: float | None = None

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used, 0)
