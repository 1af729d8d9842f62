from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from .concat import ManifestConcatenator
from .config import ConcatSettings
from .exceptions import ConcatError
from .models import MasterManifest, SourceSpec
from .utils.http_client import HttpClient
from .utils.output import write_manifest
from .utils.url_utils import infer_mime_type

load_dotenv()

SOURCE_SEPARATOR = "::"


def _csv_arg(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _source_arg(value: str) -> SourceSpec:
    url, _, mime_type = value.partition(SOURCE_SEPARATOR)
    return SourceSpec(url=url.strip() or None, mime_type=mime_type.strip() or None)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = ConcatSettings.from_env()
    parser = argparse.ArgumentParser(description="Concatenate HLS/DASH sources into one master manifest.")
    parser.add_argument(
        "--source",
        dest="sources",
        action="append",
        type=_source_arg,
        default=[],
        help=f"Manifest URL, optionally followed by {SOURCE_SEPARATOR}MIME_TYPE (repeatable, in playback order)",
    )
    parser.add_argument("--sources-file", help="JSON list of {url, mimeType} objects (local path or URL)")
    parser.add_argument(
        "--resolution",
        type=int,
        default=settings.target_vertical_resolution,
        help="Target vertical resolution used to pick each source's rendition",
    )
    parser.add_argument(
        "--initial-bandwidth",
        type=int,
        default=settings.initial_bandwidth,
        help="Bandwidth (bps) used to pick renditions when no resolution is declared",
    )
    parser.add_argument("--timeout", type=int, default=settings.timeout, help="Per-request timeout in seconds")
    parser.add_argument(
        "--supported-codecs",
        type=_csv_arg,
        default=settings.supported_codecs,
        help="Comma-separated video codec prefixes the target decoder accepts (default: accept all)",
    )
    parser.add_argument("--master-uri", default=settings.master_uri, help="URI placed on the combined master")
    parser.add_argument("--output", default="-", help="Where to write the manifest JSON (default: stdout)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def collect_sources(args: argparse.Namespace, http_client: HttpClient) -> list[SourceSpec]:
    sources: list[SourceSpec] = []
    if args.sources_file:
        entries = http_client.fetch_json(args.sources_file)
        if not isinstance(entries, list):
            raise ValueError(f"{args.sources_file} must contain a JSON list of sources")
        sources.extend(SourceSpec.from_value(entry) for entry in entries)
    sources.extend(args.sources)

    for source in sources:
        if source.url and not source.mime_type:
            source.mime_type = infer_mime_type(source.url)
            if source.mime_type:
                logging.debug("Inferred mime type %s for %s", source.mime_type, source.url)
    return sources


async def run(args: argparse.Namespace, sources: list[SourceSpec], http_client: HttpClient) -> MasterManifest:
    settings = ConcatSettings(
        initial_bandwidth=args.initial_bandwidth,
        target_vertical_resolution=args.resolution,
        timeout=args.timeout,
        master_uri=args.master_uri,
        supported_codecs=args.supported_codecs,
    )
    concatenator = ManifestConcatenator(http_client, settings=settings)
    try:
        return await concatenator.concatenate(sources, settings.target_vertical_resolution)
    finally:
        await http_client.aclose()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    http_client = HttpClient(timeout=args.timeout)
    try:
        sources = collect_sources(args, http_client)
        logging.info("Concatenating %s source(s) at %sp", len(sources), args.resolution)
        manifest = asyncio.run(run(args, sources, http_client))
    except ConcatError as exc:
        logging.error("Concatenation failed: %s", exc)
        return 1
    except (OSError, ValueError) as exc:
        logging.error("Unable to load sources: %s", exc)
        return 1
    finally:
        http_client.close()

    write_manifest(manifest, args.output)
    logging.info("Wrote combined manifest with %s segment(s)", len(manifest.playlists[0].segments or []))
    return 0


if __name__ == "__main__":
    sys.exit(main())
