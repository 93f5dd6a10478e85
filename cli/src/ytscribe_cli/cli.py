"""Main CLI entry point for ytscribe."""

import click

from ytscribe.logging_config import configure_cli_logging

from .commands import server, transcript


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
def main(verbose: bool):
    """ytscribe - YouTube transcripts from the command line."""
    configure_cli_logging(verbose=verbose)


main.add_command(transcript.transcript)
main.add_command(transcript.tokens)
main.add_command(transcript.summarize)
main.add_command(server.serve)


if __name__ == "__main__":
    main()
