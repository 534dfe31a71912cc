"""Command-line interface for pdfnarrator.

Responsibilities:
- Expose user-facing commands for conversion, chunk planning, and credentials.
- Convert CLI arguments into `RunConfiguration` and execute the pipeline.
- Map run outcomes to exit codes: 0 success, 3 partial success, 1 failure.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .cli_rendering import (
    echo_chunk_list,
    echo_chunk_progress,
    echo_run_summary,
    exit_with_command_error,
)
from .cli_runtime import resolve_provider_runtime_sources
from .config import ConfigLoader, RunConfiguration, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import NoOutputProducedError, PipelineStageError
from .parsing import normalize_optional_string
from .pipeline import NarrationPipeline
from .telemetry.logger import RunLogger

PARTIAL_SUCCESS_EXIT_CODE = 3

app = typer.Typer(
    name="pdfnarrator",
    no_args_is_help=True,
    help="Convert text-based PDF documents into a single narrated audio file.",
)


class StageProgressIndicator:
    """Render deterministic per-stage progress lines for long-running commands."""

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{stage_index}/{stage_total} stage={stage_name}"
        )


def _lowered(value: str | None) -> str | None:
    normalized = normalize_optional_string(value)
    return normalized.lower() if normalized is not None else None


def _load_yaml_config(config_path: Path | None) -> RunConfiguration | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify YAML syntax and file permissions.",
        ) from exc


def _resolve_command_base_config(
    config_file: Path | None,
    input_pdf: Path | None,
    **overrides: Any,
) -> RunConfiguration:
    """Resolve effective command config from YAML defaults and explicit CLI overrides."""

    loaded_config = _load_yaml_config(config_file)
    if loaded_config is None:
        if input_pdf is None:
            raise PipelineStageError(
                stage="config",
                detail="Input PDF path is required when `--config` is not provided.",
                hint="Pass `<input.pdf>` or use `--config <path.yaml>` with `input_pdf`.",
            )
        loaded_config = RunConfiguration(input_pdf=input_pdf)
    return loaded_config.with_overrides(input_pdf=input_pdf, **overrides)


@app.command("convert")
def convert_command(
    input_pdf: Annotated[
        Path | None,
        typer.Argument(help="Path to source PDF. Required unless provided by `--config`."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option(
            "--out",
            help="Output audio file. Defaults to `<input stem>[-test].<format>` next to the PDF.",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    max_chunk_size: Annotated[
        int | None,
        typer.Option("--max-chunk-size", min=1, help="Maximum chunk length in characters."),
    ] = None,
    start_chunk: Annotated[
        int | None,
        typer.Option("--start-chunk", min=1, help="1-based index of the first chunk to process."),
    ] = None,
    max_chunks: Annotated[
        int | None,
        typer.Option("--max-chunks", min=1, help="Maximum number of chunks to process."),
    ] = None,
    delay_ms: Annotated[
        int | None,
        typer.Option("--delay-ms", min=0, help="Pause between provider calls in milliseconds."),
    ] = None,
    audio_format: Annotated[
        str | None,
        typer.Option("--format", help="Output audio format: `mp3` or `wav`."),
    ] = None,
    speaking_rate: Annotated[
        float | None,
        typer.Option("--speed", help="Speaking rate multiplier."),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="TTS provider id: `openai` or offline `test`."),
    ] = None,
    tts_model: Annotated[
        str | None, typer.Option("--model", help="TTS model id override.")
    ] = None,
    tts_voice: Annotated[
        str | None, typer.Option("--voice", help="TTS voice id override.")
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
        ),
    ] = None,
    prompt_api_key: Annotated[
        bool,
        typer.Option("--prompt-api-key", help="Prompt for API key with hidden input."),
    ] = False,
    store_api_key: Annotated[
        bool,
        typer.Option(
            "--store-api-key/--no-store-api-key",
            help="Persist CLI-entered API key to secure credential storage.",
        ),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Emit per-chunk debug log events."),
    ] = False,
) -> None:
    """Convert a PDF into one narrated audio file."""

    try:
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            provider=_lowered(provider),
            tts_model=tts_model,
            tts_voice=tts_voice,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        base_config = _resolve_command_base_config(
            config_file,
            input_pdf,
            output_path=out,
            max_chunk_size=max_chunk_size,
            start_chunk=start_chunk,
            max_chunks=max_chunks,
            delay_ms=delay_ms,
            audio_format=_lowered(audio_format),
            speaking_rate=speaking_rate,
        )
        config = base_config.with_runtime_sources(
            RuntimeConfigSources(
                cli=runtime_cli_values,
                secure=runtime_secure_values,
                env=os.environ,
            )
        )
        progress = StageProgressIndicator(command_name="convert")
        pipeline = NarrationPipeline(
            run_logger=RunLogger(level="DEBUG" if verbose else "INFO"),
            stage_progress_callback=progress.on_stage_start,
            chunk_progress_callback=echo_chunk_progress,
        )
        summary = pipeline.run(config)
    except NoOutputProducedError as exc:
        echo_run_summary(exc.summary)
        exit_with_command_error("convert", exc)
    except Exception as exc:
        exit_with_command_error("convert", exc)

    echo_run_summary(summary)
    if summary.status == "partial":
        raise typer.Exit(code=PARTIAL_SUCCESS_EXIT_CODE)


@app.command("chunks")
def chunks_command(
    input_pdf: Annotated[
        Path | None,
        typer.Argument(help="Path to source PDF. Required unless provided by `--config`."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    max_chunk_size: Annotated[
        int | None,
        typer.Option("--max-chunk-size", min=1, help="Maximum chunk length in characters."),
    ] = None,
) -> None:
    """List the chunks a conversion would synthesize, without calling any provider."""

    try:
        config = _resolve_command_base_config(
            config_file,
            input_pdf,
            max_chunk_size=max_chunk_size,
        )
        chunks = NarrationPipeline().plan_chunks(config)
    except Exception as exc:
        exit_with_command_error("chunks", exc)

    echo_chunk_list(chunks)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "OpenAI API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail=f"Failed to store API key securely: {exc}",
                    hint="Install and configure a keyring backend and retry.",
                ),
            )
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored OpenAI API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
