"""HTTP server command for the ytscribe CLI."""

import click
import uvicorn


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", type=int, default=8000, show_default=True, help="Port to listen on.")
@click.option("--reload", is_flag=True, help="Restart on code changes (development only).")
def serve(host: str, port: int, reload: bool):
    """Serve the transcript HTTP API."""
    uvicorn.run("ytscribe.main:app", host=host, port=port, reload=reload)
