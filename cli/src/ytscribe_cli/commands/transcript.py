"""Transcript commands for the ytscribe CLI."""

import json
import sys

import click
from rich.console import Console

from ytscribe.config import load_settings
from ytscribe.services.summarizer import SummarizerError, TranscriptSummarizer, build_openai_client
from ytscribe.services.tokenizer import TokenCounter
from ytscribe.services.transcripts import (
    TranscriptClient,
    TranscriptConfig,
    TranscriptError,
    join_segment_text,
)

from ..config import CliConfig

console = Console(stderr=True)


def _build_client(config: CliConfig, timeout: float | None) -> TranscriptClient:
    return TranscriptClient(timeout_seconds=timeout or config.timeout_seconds)


def _transcript_config(config: CliConfig, lang: str | None, country: str | None) -> TranscriptConfig:
    return TranscriptConfig.from_options(
        language=lang or config.language,
        country=country or config.country,
    )


def _fetch_text(url: str, lang: str | None, country: str | None, timeout: float | None) -> str:
    config = CliConfig.load()
    client = _build_client(config, timeout)
    try:
        return client.fetch_transcript_text(url, _transcript_config(config, lang, country))
    except TranscriptError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)


@click.command()
@click.argument("url")
@click.option("--lang", default=None, help="Caption language, e.g. en.")
@click.option("--country", default=None, help="Country code, e.g. US.")
@click.option("--metadata", is_flag=True, help="Print segments with timings as JSON.")
@click.option("--timeout", type=float, default=None, help="Overall timeout in seconds.")
def transcript(url: str, lang: str | None, country: str | None, metadata: bool, timeout: float | None):
    """Print the transcript of a YouTube video."""
    if not metadata:
        click.echo(_fetch_text(url, lang, country, timeout))
        return

    config = CliConfig.load()
    client = _build_client(config, timeout)
    try:
        segments = client.fetch_transcript(url, _transcript_config(config, lang, country))
    except TranscriptError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    click.echo(json.dumps([segment.to_dict() for segment in segments], indent=2, ensure_ascii=False))


@click.command()
@click.argument("url")
@click.option("--lang", default=None, help="Caption language, e.g. en.")
@click.option("--country", default=None, help="Country code, e.g. US.")
@click.option("--timeout", type=float, default=None, help="Overall timeout in seconds.")
def tokens(url: str, lang: str | None, country: str | None, timeout: float | None):
    """Count the tokens in a video's transcript."""
    text = _fetch_text(url, lang, country, timeout)
    counter = TokenCounter(load_settings().tokenizer_model)
    click.echo(str(counter.count(text)))


@click.command()
@click.argument("url")
@click.option("--lang", default=None, help="Caption language, e.g. en.")
@click.option("--country", default=None, help="Country code, e.g. US.")
@click.option("--style", default=None, help="Extra instructions for the summary.")
@click.option("--timeout", type=float, default=None, help="Overall timeout in seconds.")
def summarize(url: str, lang: str | None, country: str | None, style: str | None, timeout: float | None):
    """Summarize a video's transcript with an LLM."""
    settings = load_settings()
    text = _fetch_text(url, lang, country, timeout)

    try:
        summarizer = TranscriptSummarizer(
            client=build_openai_client(settings),
            model=settings.summary_model,
            token_counter=TokenCounter(settings.tokenizer_model),
            chunk_tokens=settings.summary_chunk_tokens,
        )
        click.echo(summarizer.summarize(text, style=style))
    except SummarizerError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)
