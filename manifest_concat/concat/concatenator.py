"""Top-level operation: turn a list of sources into one combined master manifest."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from ..config import ConcatSettings
from ..exceptions import CompatibilityError, ConcatError, ValidationError
from ..models import FetchedManifest, MasterManifest, SourceSpec
from ..utils.codecs import DecoderPredicate, codec_prefix_predicate
from ..utils.http_client import HttpClient
from .combiner import combine_playlists, construct_master_manifest
from .fetch import FetchCoordinator
from .filters import remove_unsupported_playlists
from .normalizer import parse_manifest
from .resolver import resolve_playlists
from .selection import choose_audio_playlists, choose_video_playlists

SourceLike = Union[SourceSpec, Mapping[str, Any]]
ConcatCallback = Callable[..., None]


def validate_sources(sources: Optional[Sequence[SourceLike]]) -> List[SourceSpec]:
    if not sources:
        raise ValidationError("No sources provided")
    specs = [SourceSpec.from_value(source) for source in sources]
    for spec in specs:
        if not spec.url:
            raise ValidationError("All manifests must include a URL")
        if not spec.mime_type:
            raise ValidationError("All manifests must include a mime type")
    return specs


class ManifestConcatenator:
    """Fetches source manifests and joins one rendition of each into a single stream."""

    def __init__(
        self,
        http_client: HttpClient,
        settings: Optional[ConcatSettings] = None,
        is_type_supported: Optional[DecoderPredicate] = None,
    ) -> None:
        self.settings = settings or ConcatSettings()
        self._coordinator = FetchCoordinator(http_client)
        if is_type_supported is None and self.settings.supported_codecs:
            is_type_supported = codec_prefix_predicate(self.settings.supported_codecs)
        self._is_type_supported = is_type_supported

    async def concatenate(self, sources: Optional[Sequence[SourceLike]],
                          target_vertical_resolution: Optional[int] = None) -> MasterManifest:
        """Returns the combined master manifest or raises a :class:`ConcatError`."""

        specs = validate_sources(sources)
        if target_vertical_resolution is None:
            target_vertical_resolution = self.settings.target_vertical_resolution

        responses = await self._coordinator.request_all([spec.url for spec in specs])
        manifests = [
            FetchedManifest(url=spec.url, body=responses[spec.url], mime_type=spec.mime_type) for spec in specs
        ]
        return await self.concatenate_manifests(manifests, target_vertical_resolution)

    async def concatenate_videos(self, sources: Optional[Sequence[SourceLike]], target_vertical_resolution: int,
                                 callback: ConcatCallback) -> None:
        """Callback flavour of :meth:`concatenate`.

        Calls ``callback(None, manifest)`` on success or ``callback(error)``
        on any failure other than cancellation, exactly once.
        """

        try:
            manifest = await self.concatenate(sources, target_vertical_resolution)
        except ConcatError as exc:
            logging.debug("Concatenation failed: %s", exc)
            callback(exc)
            return
        except Exception as exc:
            logging.exception("Unexpected error while concatenating")
            callback(exc)
            return
        callback(None, manifest)

    async def concatenate_manifests(self, manifests: Sequence[FetchedManifest],
                                    target_vertical_resolution: int) -> MasterManifest:
        normalized = [parse_manifest(manifest.url, manifest.body, manifest.mime_type) for manifest in manifests]

        supported = remove_unsupported_playlists(normalized, self._is_type_supported)
        if any(not playlists for playlists in supported):
            raise CompatibilityError("Did not find a supported playlist for each manifest")

        video_playlists = choose_video_playlists(
            supported, target_vertical_resolution, self.settings.initial_bandwidth
        )
        audio_playlists = choose_audio_playlists(normalized, video_playlists)
        logging.info(
            "Selected %s video and %s audio rendition(s)", len(video_playlists), len(audio_playlists)
        )

        # Audio renditions pair 1:1 with the sources, so they reuse the sources' mime types.
        mime_types = [manifest.mime_type for manifest in manifests]
        mime_types += mime_types[: len(audio_playlists)]

        resolved = await resolve_playlists(video_playlists + audio_playlists, mime_types, self._coordinator)
        resolved_video = resolved[: len(video_playlists)]
        resolved_audio = resolved[len(video_playlists):]

        combined_video = combine_playlists(resolved_video)
        combined_audio = combine_playlists(resolved_audio, uri_suffix="-audio") if resolved_audio else None
        return construct_master_manifest(combined_video, combined_audio, uri=self.settings.master_uri)
