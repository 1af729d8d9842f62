"""Drops renditions that cannot take part in a concatenated stream."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..models import Rendition
from ..utils.codecs import (
    CodecInfo,
    DecoderPredicate,
    audio_profile_from_default,
    map_legacy_avc_codecs,
    parse_codecs,
)
from .normalizer import NormalizedManifest, renditions_of


def codecs_for_playlists(manifest: NormalizedManifest) -> Dict[str, CodecInfo]:
    """Maps each rendition's resolved URI to its parsed codecs.

    Renditions without a ``CODECS`` attribute are left out. When a rendition
    declares a single codec but references an audio group, the default
    track's audio codec counts as the second one.
    """

    media_groups = manifest.media_groups
    codecs_by_uri: Dict[str, CodecInfo] = {}
    for rendition in renditions_of(manifest):
        attributes = rendition.attributes
        if not attributes.codecs:
            continue
        codecs = parse_codecs(attributes.codecs)
        if codecs.codec_count != 2 and attributes.audio:
            audio_profile = audio_profile_from_default(media_groups, attributes.audio)
            if audio_profile:
                codecs.audio_profile = audio_profile
                codecs.codec_count += 1
        codecs_by_uri[rendition.resolved_uri] = codecs
    return codecs_by_uri


def remove_unsupported_playlists(manifests: Sequence[NormalizedManifest],
                                 is_type_supported: Optional[DecoderPredicate] = None) -> List[List[Rendition]]:
    """Returns, per manifest, the renditions that carry both audio and video
    and whose video codec the decoder accepts.

    Passing these checks does not guarantee the renditions of different
    manifests can be played back to back; that is left to the player.
    """

    supported = []
    for manifest in manifests:
        codecs_by_uri = codecs_for_playlists(manifest)
        kept = []
        for rendition in renditions_of(manifest):
            codecs = codecs_by_uri.get(rendition.resolved_uri)
            if codecs is None:
                logging.warning("Missing codec info for playlist with URI: %s", rendition.resolved_uri)
                kept.append(rendition)
                continue
            if codecs.codec_count != 2:
                logging.debug("Dropping %s: %s codec(s) declared", rendition.resolved_uri, codecs.codec_count)
                continue
            video_codecs = map_legacy_avc_codecs(codecs.video_codec_string or rendition.attributes.codecs)
            if is_type_supported is not None and not is_type_supported(video_codecs):
                logging.debug("Dropping %s: codec %s is not supported", rendition.resolved_uri, video_codecs)
                continue
            kept.append(rendition)
        supported.append(kept)
    return supported
