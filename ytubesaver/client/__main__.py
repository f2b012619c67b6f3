"""
Command line client: fetch metadata or download one YouTube/Instagram URL.

    python -m ytubesaver.client https://youtu.be/dQw4w9WgXcQ --format audio
"""
import argparse
import asyncio
import sys

from rich.console import Console
from rich.table import Table

from ytubesaver.client.service import DownloadClient, UnsupportedUrlError
from ytubesaver.config.settings import config
from ytubesaver.core.logging import setup_logging
from ytubesaver.models.request import DownloadRequest

console = Console()


def _print_info(info) -> None:
    table = Table(title=info.title, show_header=False)
    table.add_row("Platform", info.platform)
    table.add_row("ID", info.id)
    table.add_row("Uploader", info.uploader)
    table.add_row("Duration", info.duration)
    table.add_row("Thumbnail", info.thumbnail or "-")
    table.add_row("Formats", str(len(info.formats)))
    console.print(table)


async def _run(args) -> int:
    providers = [] if args.no_fallback else None
    async with DownloadClient(backend_url=args.backend, providers=providers, save_dir=args.output_dir) as client:
        if args.info:
            try:
                info = await client.get_video_info(args.url)
            except UnsupportedUrlError as e:
                console.print(f"[red]{e}[/red]")
                return 2
            _print_info(info)
            return 0

        request = DownloadRequest(url=args.url, format=args.format, quality=args.quality)
        with console.status("Downloading..."):
            result = await client.download(request)

    if result.success:
        console.print(f"[green]✓ {result.message}[/green]")
        return 0
    console.print(f"[red]✗ {result.message}[/red]")
    return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="ytubesaver-get", description="Save a YouTube or Instagram video")
    parser.add_argument("url", help="YouTube or Instagram URL")
    parser.add_argument("--format", choices=["video", "audio"], default="video")
    parser.add_argument("--quality", default="best", help='Quality label, e.g. "1080p" or "720p"')
    parser.add_argument("--backend", default=config.client.backend_url, help="API base URL")
    parser.add_argument("--output-dir", default=".", help="Where to save the file")
    parser.add_argument("--info", action="store_true", help="Only show video information")
    parser.add_argument("--no-fallback", action="store_true", help="Do not try third-party services")
    args = parser.parse_args(argv)

    setup_logging()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
