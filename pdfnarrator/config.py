"""Configuration model and loaders for pdfnarrator.

Responsibilities:
- Define the immutable per-run configuration as a typed dataclass.
- Resolve provider runtime values with deterministic source precedence.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `RunConfiguration`: frozen settings for one conversion run.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `RunConfiguration`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .models.datatypes import SynthesisOptions
from .parsing import (
    normalize_optional_string,
    parse_integer,
    parse_positive_float,
)


DEFAULT_MAX_CHUNK_SIZE = 2900
DEFAULT_PROVIDER_CHAR_LIMIT = 3000
DEFAULT_DELAY_MS = 1000
_DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
_DEFAULT_TTS_VOICE = "alloy"
SUPPORTED_PROVIDER_IDS = frozenset({"openai", "test"})
SUPPORTED_AUDIO_FORMATS = frozenset({"mp3", "wav"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


_RUNTIME_ENV_KEYS = {
    "provider": "PDFNARRATOR_PROVIDER",
    "tts_model": "PDFNARRATOR_TTS_MODEL",
    "tts_voice": "PDFNARRATOR_TTS_VOICE",
    "api_key": "OPENAI_API_KEY",
}


@dataclass(frozen=True, slots=True)
class RunConfiguration:
    """Immutable configuration for one conversion run.

    Attributes:
        input_pdf: Path to the source PDF.
        output_path: Output audio file; derived from the input name when `None`.
        max_chunk_size: Maximum chunk length in characters.
        start_chunk: 1-based index of the first chunk to synthesize.
        max_chunks: Optional cap on synthesized chunks; `None` processes the remainder.
        delay_ms: Pause between provider calls in milliseconds.
        provider: TTS provider identifier (`openai` or offline `test`).
        tts_model: Provider model identifier.
        tts_voice: Provider voice identifier.
        audio_format: Output audio encoding (`mp3` or `wav`).
        speaking_rate: Relative speaking rate multiplier.
        api_key: Optional provider API key (never persisted or logged).
        provider_char_limit: Hard per-request text limit of the provider.
    """

    input_pdf: Path
    output_path: Path | None = None
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE
    start_chunk: int = 1
    max_chunks: int | None = None
    delay_ms: int = DEFAULT_DELAY_MS
    provider: str = "openai"
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    audio_format: str = "mp3"
    speaking_rate: float = 1.0
    api_key: str | None = None
    provider_char_limit: int = DEFAULT_PROVIDER_CHAR_LIMIT

    def validate(self) -> None:
        """Validate configuration values before pipeline execution."""

        if self.max_chunk_size <= 0:
            raise ValueError("`max_chunk_size` must be a positive integer.")
        if self.provider_char_limit <= 0:
            raise ValueError("`provider_char_limit` must be a positive integer.")
        if self.max_chunk_size > self.provider_char_limit:
            raise ValueError(
                f"`max_chunk_size` ({self.max_chunk_size}) must not exceed the provider "
                f"limit of {self.provider_char_limit} characters."
            )
        if self.start_chunk < 1:
            raise ValueError("`start_chunk` must be a positive integer (1-based).")
        if self.max_chunks is not None and self.max_chunks <= 0:
            raise ValueError("`max_chunks` must be a positive integer when set.")
        if self.delay_ms < 0:
            raise ValueError("`delay_ms` must be zero or a positive integer.")
        if self.speaking_rate <= 0:
            raise ValueError("`speaking_rate` must be a positive number.")
        if self.provider not in SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `provider` value `{self.provider}`; supported: {supported}."
            )
        if self.audio_format not in SUPPORTED_AUDIO_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_AUDIO_FORMATS))
            raise ValueError(
                f"Unsupported `audio_format` value `{self.audio_format}`; supported: {supported}."
            )
        for field_name in ("tts_model", "tts_voice"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"`{field_name}` must be a non-empty string.")

    @property
    def is_test_mode(self) -> bool:
        return self.provider == "test"

    def resolved_output_path(self) -> Path:
        """Return the output file path, deriving `<stem>[-test].<format>` when unset."""

        if self.output_path is not None:
            return self.output_path
        suffix = "-test" if self.is_test_mode else ""
        return self.input_pdf.with_name(f"{self.input_pdf.stem}{suffix}.{self.audio_format}")

    def synthesis_options(self) -> SynthesisOptions:
        return SynthesisOptions(
            voice=self.tts_voice,
            audio_format=self.audio_format,
            model=self.tts_model,
            speaking_rate=self.speaking_rate,
        )

    def selected_range(self, total_chunks: int) -> range:
        """Return 0-based chunk positions selected by `start_chunk` and `max_chunks`."""

        start = min(self.start_chunk - 1, total_chunks)
        if self.max_chunks is None:
            return range(start, total_chunks)
        return range(start, min(start + self.max_chunks, total_chunks))

    def with_overrides(self, **values: Any) -> RunConfiguration:
        """Return a copy with every non-`None` override applied."""

        changes = {key: value for key, value in values.items() if value is not None}
        return replace(self, **changes) if changes else self

    def with_runtime_sources(self, sources: RuntimeConfigSources) -> RunConfiguration:
        """Resolve provider runtime values and return a new configuration.

        Precedence for each key is `cli` > `secure` > `env` > current field value.
        """

        resolved: dict[str, Any] = {}
        for key, env_key in _RUNTIME_ENV_KEYS.items():
            value = (
                _normalized_lookup(sources.cli, key)
                or _normalized_lookup(sources.secure, key)
                or _normalized_lookup(sources.env, env_key)
            )
            if value is not None:
                resolved[key] = value.lower() if key == "provider" else value
        return replace(self, **resolved) if resolved else self


def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
    """Return a stripped mapping value for a key or `None` when missing/blank."""

    if key not in mapping:
        return None
    return normalize_optional_string(mapping.get(key))


def _parse_optional_cap(value: object, field_name: str) -> int | None:
    """Parse `max_chunks`, where blank, `all`, or null mean no cap."""

    normalized = normalize_optional_string(value)
    if normalized is None or normalized.lower() == "all":
        return None
    return parse_integer(value, field_name, minimum=1)


_FIELD_PARSERS: dict[str, Callable[[object, str], Any]] = {
    "input_pdf": lambda value, name: Path(_require_string(value, name)),
    "output_path": lambda value, name: Path(_require_string(value, name)),
    "max_chunk_size": lambda value, name: parse_integer(value, name, minimum=1),
    "start_chunk": lambda value, name: parse_integer(value, name, minimum=1),
    "max_chunks": _parse_optional_cap,
    "delay_ms": lambda value, name: parse_integer(value, name, minimum=0),
    "provider": lambda value, name: _require_string(value, name).lower(),
    "tts_model": lambda value, name: _require_string(value, name),
    "tts_voice": lambda value, name: _require_string(value, name),
    "audio_format": lambda value, name: _require_string(value, name).lower(),
    "speaking_rate": parse_positive_float,
    "api_key": lambda value, name: _require_string(value, name),
    "provider_char_limit": lambda value, name: parse_integer(value, name, minimum=1),
}


def _require_string(value: object, field_name: str) -> str:
    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{field_name}` must be a non-empty string.")
    return normalized


class ConfigLoader:
    """Factory methods for creating `RunConfiguration` from external sources."""

    _REQUIRED_KEYS = frozenset({"input_pdf"})
    _ENV_PREFIX = "PDFNARRATOR_"

    @staticmethod
    def from_yaml(path: Path) -> RunConfiguration:
        """Create a validated config from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> RunConfiguration:
        """Create a validated config from `PDFNARRATOR_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, object] = {}
        for key in _FIELD_PARSERS:
            env_key = _RUNTIME_ENV_KEYS.get(key, f"{ConfigLoader._ENV_PREFIX}{key.upper()}")
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        if "input_pdf" not in payload:
            raise ValueError("Environment variable `PDFNARRATOR_INPUT_PDF` is required.")
        return ConfigLoader.from_mapping(payload, source_label="environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> RunConfiguration:
        """Build a validated config from a key/value mapping."""

        unknown = sorted(str(key) for key in set(payload).difference(_FIELD_PARSERS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")
        missing = sorted(key for key in ConfigLoader._REQUIRED_KEYS if key not in payload)
        if missing:
            raise ValueError(f"{source_label} is missing required key(s): {', '.join(missing)}.")

        values: dict[str, Any] = {}
        for key, raw_value in payload.items():
            if raw_value is None and key != "input_pdf":
                continue
            try:
                values[key] = _FIELD_PARSERS[key](raw_value, key)
            except ValueError as exc:
                raise ValueError(f"{source_label} field {exc}") from exc

        config = RunConfiguration(**values)
        config.validate()
        return config
