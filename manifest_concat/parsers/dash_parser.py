"""Parses static DASH MPDs into a :class:`MasterManifest` with resolved segments."""

from __future__ import annotations

import logging
import math
import re
from typing import Dict, List, Optional, Tuple, Union

import isodate
from lxml import etree

from ..exceptions import ParseError
from ..models import (
    ByteRange,
    MasterManifest,
    MediaGroups,
    MediaGroupTrack,
    Rendition,
    RenditionAttributes,
    Resolution,
    Segment,
    SegmentMap,
)
from ..utils.url_utils import resolve_url

AUDIO_GROUP_ID = "audio"
TEMPLATE_IDENTIFIER = re.compile(r"\$(RepresentationID|Number|Bandwidth|Time)(?:%0(\d+)d)?\$")


def _local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def _children(element: etree._Element, name: str) -> List[etree._Element]:
    return [child for child in element if isinstance(child.tag, str) and _local_name(child) == name]


def _child(element: Optional[etree._Element], name: str) -> Optional[etree._Element]:
    if element is None:
        return None
    children = _children(element, name)
    return children[0] if children else None


def _parse_duration(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return isodate.parse_duration(value).total_seconds()
    except (isodate.ISO8601Error, ValueError) as exc:
        raise ParseError(f"Invalid duration {value!r}") from exc


def _parse_int(value: Union[str, int, None], name: str, minimum: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Invalid {name} {value!r}") from exc
    if minimum is not None and number < minimum:
        raise ParseError(f"Invalid {name} {value!r}")
    return number


def _parse_range(value: Optional[str]) -> Optional[ByteRange]:
    """Converts a DASH ``start-end`` range into a length/offset byterange."""

    if not value:
        return None
    start_text, _, end_text = value.partition("-")
    start, end = _parse_int(start_text, "range start", 0), _parse_int(end_text, "range end", 0)
    return ByteRange(length=end - start + 1, offset=start)


def fill_template(template: str, representation_id: str, bandwidth: Optional[int], number: Optional[int] = None,
                  time: Optional[int] = None) -> str:
    """Substitutes the ``$Identifier$`` placeholders of a segment template."""

    values = {
        "RepresentationID": representation_id,
        "Bandwidth": bandwidth,
        "Number": number,
        "Time": time,
    }

    def replace(match: re.Match) -> str:
        value = values[match.group(1)]
        if value is None:
            return match.group(0)
        if match.group(2) and match.group(1) != "RepresentationID":
            return str(value).zfill(int(match.group(2)))
        return str(value)

    return TEMPLATE_IDENTIFIER.sub(replace, template).replace("$$", "$")


class _Context:
    """Inherited state while walking Period -> AdaptationSet -> Representation."""

    def __init__(self, base_url: str, period_duration: Optional[float]) -> None:
        self.base_url = base_url
        self.period_duration = period_duration
        self.template_attributes: Dict[str, str] = {}
        self.template_timeline: Optional[etree._Element] = None
        self.segment_list: Optional[etree._Element] = None
        self.segment_base: Optional[etree._Element] = None

    def descend(self, element: etree._Element) -> "_Context":
        child = _Context(self.base_url, self.period_duration)
        child.template_attributes = dict(self.template_attributes)
        child.template_timeline = self.template_timeline
        child.segment_list = self.segment_list
        child.segment_base = self.segment_base

        base = _child(element, "BaseURL")
        if base is not None and base.text and base.text.strip():
            child.base_url = resolve_url(self.base_url, base.text.strip())

        template = _child(element, "SegmentTemplate")
        if template is not None:
            child.template_attributes.update(template.attrib)
            timeline = _child(template, "SegmentTimeline")
            if timeline is not None:
                child.template_timeline = timeline
        segment_list = _child(element, "SegmentList")
        if segment_list is not None:
            child.segment_list = segment_list
        segment_base = _child(element, "SegmentBase")
        if segment_base is not None:
            child.segment_base = segment_base
        return child


class DashManifestParser:
    """Turns a static, single-period MPD into a master manifest.

    Video representations become the master's renditions (URIs
    ``placeholder-uri-<n>``); audio adaptation sets become tracks of the
    ``audio`` media group. All segment lists are resolved eagerly.
    """

    def parse(self, text: str, base_url: str) -> MasterManifest:
        try:
            # Fetched documents never get entity expansion or network access.
            parser = etree.XMLParser(resolve_entities=False, no_network=True)
            root = etree.fromstring(text.strip().encode("utf-8"), parser)
        except etree.XMLSyntaxError as exc:
            raise ParseError(f"Unable to parse MPD at {base_url}: {exc}") from exc

        if _local_name(root) != "MPD":
            raise ParseError(f"Document at {base_url} is not an MPD")
        if root.get("type", "static") != "static":
            raise ParseError(f"Live MPD at {base_url} cannot be concatenated")

        periods = _children(root, "Period")
        if len(periods) != 1:
            raise ParseError(f"Expected exactly one Period in {base_url}, found {len(periods)}")
        period = periods[0]

        period_duration = _parse_duration(period.get("duration"))
        if period_duration is None:
            total = _parse_duration(root.get("mediaPresentationDuration"))
            start = _parse_duration(period.get("start")) or 0.0
            period_duration = total - start if total is not None else None

        root_context = _Context(base_url, period_duration).descend(root)
        period_context = root_context.descend(period)

        videos: List[Rendition] = []
        audio_tracks: Dict[str, MediaGroupTrack] = {}
        has_main_audio = False
        for adaptation_set in _children(period, "AdaptationSet"):
            set_context = period_context.descend(adaptation_set)
            role = _child(adaptation_set, "Role")
            role_value = role.get("value", "") if role is not None else ""
            language = adaptation_set.get("lang") or ""
            for representation in _children(adaptation_set, "Representation"):
                content_type = self._content_type(adaptation_set, representation)
                if content_type == "video":
                    rendition = self._build_rendition(
                        representation, set_context.descend(representation), f"placeholder-uri-{len(videos)}", base_url
                    )
                    videos.append(rendition)
                elif content_type == "audio":
                    label = adaptation_set.get("label") or (
                        f"{language} ({role_value})" if language and role_value else language or "main"
                    )
                    track = audio_tracks.get(label)
                    if track is None:
                        track = MediaGroupTrack(
                            default=role_value == "main" and not has_main_audio,
                            autoselect=True,
                            language=language,
                            uri="",
                            playlists=[],
                        )
                        has_main_audio = has_main_audio or track.default
                        audio_tracks[label] = track
                    uri = f"placeholder-uri-audio-{label}-{len(track.playlists)}"
                    track.playlists.append(
                        self._build_rendition(representation, set_context.descend(representation), uri, base_url)
                    )
                else:
                    logging.debug("Skipping %s representation %s", content_type, representation.get("id"))

        if audio_tracks and not has_main_audio:
            next(iter(audio_tracks.values())).default = True

        media_groups = MediaGroups()
        if audio_tracks:
            media_groups.audio[AUDIO_GROUP_ID] = audio_tracks
            for rendition in videos:
                rendition.attributes.audio = AUDIO_GROUP_ID

        logging.debug("DASH %s: %s video renditions, %s audio tracks", base_url, len(videos), len(audio_tracks))
        return MasterManifest(uri=base_url, playlists=videos, media_groups=media_groups)

    @staticmethod
    def _content_type(adaptation_set: etree._Element, representation: etree._Element) -> str:
        mime_type = representation.get("mimeType") or adaptation_set.get("mimeType") or ""
        content_type = adaptation_set.get("contentType") or mime_type.split("/", 1)[0]
        if content_type in {"video", "audio"}:
            return content_type
        codecs = representation.get("codecs") or adaptation_set.get("codecs") or ""
        if codecs.startswith(("avc", "hvc", "hev", "vp0", "av01")):
            return "video"
        if codecs.startswith(("mp4a", "ac-3", "ec-3", "opus")):
            return "audio"
        return content_type or "unknown"

    def _build_rendition(self, representation: etree._Element, context: _Context, uri: str,
                         manifest_url: str) -> Rendition:
        adaptation_set = representation.getparent()
        representation_id = representation.get("id", "")
        bandwidth_text = representation.get("bandwidth")
        bandwidth = _parse_int(bandwidth_text, "bandwidth", 0) if bandwidth_text else None
        width = representation.get("width") or adaptation_set.get("width")
        height = representation.get("height") or adaptation_set.get("height")
        codecs = representation.get("codecs") or adaptation_set.get("codecs")
        resolution = None
        if width and height:
            resolution = Resolution(width=_parse_int(width, "width", 0), height=_parse_int(height, "height", 0))

        segments = self._build_segments(context, representation_id, bandwidth)
        return Rendition(
            uri=uri,
            resolved_uri=resolve_url(manifest_url, uri),
            attributes=RenditionAttributes(
                bandwidth=bandwidth,
                resolution=resolution,
                codecs=codecs,
            ),
            segments=segments,
            target_duration=max((segment.duration for segment in segments), default=0),
            end_list=True,
        )

    def _build_segments(self, context: _Context, representation_id: str, bandwidth: Optional[int]) -> List[Segment]:
        if context.template_attributes.get("media"):
            return self._segments_from_template(context, representation_id, bandwidth)
        if context.segment_list is not None:
            return self._segments_from_list(context)
        return self._segments_from_base(context)

    def _timeline_entries(self, timeline: etree._Element, timescale: int,
                          period_duration: Optional[float]) -> List[Tuple[int, int]]:
        """Expands ``<S t d r>`` entries into ``(start_time, duration)`` pairs."""

        entries: List[Tuple[int, int]] = []
        elements = _children(timeline, "S")
        current = 0
        for index, element in enumerate(elements):
            duration = _parse_int(element.get("d"), "S@d", 1)
            if element.get("t") is not None:
                current = _parse_int(element.get("t"), "S@t", 0)
            repeat = _parse_int(element.get("r", 0), "S@r")
            if repeat < 0:
                if index + 1 < len(elements) and elements[index + 1].get("t") is not None:
                    end = _parse_int(elements[index + 1].get("t"), "S@t", 0)
                elif period_duration is not None:
                    end = int(period_duration * timescale)
                else:
                    raise ParseError("SegmentTimeline repeats to the end of an unbounded period")
                repeat = math.ceil((end - current) / duration) - 1
            for _ in range(repeat + 1):
                entries.append((current, duration))
                current += duration
        return entries

    def _initialization(self, context: _Context, attributes: Dict[str, str], representation_id: str,
                        bandwidth: Optional[int]) -> Optional[SegmentMap]:
        template = attributes.get("initialization")
        if not template:
            return None
        uri = fill_template(template, representation_id, bandwidth)
        return SegmentMap(uri=uri, resolved_uri=resolve_url(context.base_url, uri))

    def _segments_from_template(self, context: _Context, representation_id: str,
                                bandwidth: Optional[int]) -> List[Segment]:
        attributes = context.template_attributes
        timescale = _parse_int(attributes.get("timescale", 1), "timescale", 1)
        start_number = _parse_int(attributes.get("startNumber", 1), "startNumber", 0)
        media = attributes["media"]
        segment_map = self._initialization(context, attributes, representation_id, bandwidth)

        if context.template_timeline is not None:
            entries = self._timeline_entries(context.template_timeline, timescale, context.period_duration)
        elif context.period_duration is None:
            raise ParseError("SegmentTemplate without a timeline requires a known period duration")
        elif attributes.get("duration"):
            segment_duration = _parse_int(attributes["duration"], "duration", 1)
            total = context.period_duration * timescale
            count = max(1, math.ceil(total / segment_duration))
            entries = [
                (index * segment_duration, min(segment_duration, total - index * segment_duration))
                for index in range(count)
            ]
        else:
            entries = [(0, context.period_duration * timescale)]

        segments: List[Segment] = []
        for index, (start, duration) in enumerate(entries):
            number = start_number + index
            uri = fill_template(media, representation_id, bandwidth, number=number, time=start)
            segments.append(
                Segment(
                    uri=uri,
                    resolved_uri=resolve_url(context.base_url, uri),
                    duration=duration / timescale,
                    number=number,
                    map=segment_map,
                )
            )
        return segments

    def _segments_from_list(self, context: _Context) -> List[Segment]:
        segment_list = context.segment_list
        timescale = _parse_int(segment_list.get("timescale", 1), "timescale", 1)
        start_number = _parse_int(segment_list.get("startNumber", 1), "startNumber", 0)
        urls = _children(segment_list, "SegmentURL")

        timeline = _child(segment_list, "SegmentTimeline")
        if timeline is not None:
            durations = [duration / timescale for _, duration in
                         self._timeline_entries(timeline, timescale, context.period_duration)]
        elif segment_list.get("duration"):
            durations = [_parse_int(segment_list.get("duration"), "duration", 1) / timescale] * len(urls)
        else:
            raise ParseError("SegmentList needs either a duration or a SegmentTimeline")

        segment_map = None
        initialization = _child(segment_list, "Initialization")
        if initialization is not None and initialization.get("sourceURL"):
            init_uri = initialization.get("sourceURL")
            segment_map = SegmentMap(
                uri=init_uri,
                resolved_uri=resolve_url(context.base_url, init_uri),
                byterange=_parse_range(initialization.get("range")),
            )

        segments: List[Segment] = []
        for index, (element, duration) in enumerate(zip(urls, durations)):
            uri = element.get("media") or ""
            segments.append(
                Segment(
                    uri=uri,
                    resolved_uri=resolve_url(context.base_url, uri) if uri else context.base_url,
                    duration=duration,
                    number=start_number + index,
                    map=segment_map,
                    byterange=_parse_range(element.get("mediaRange")),
                )
            )
        return segments

    def _segments_from_base(self, context: _Context) -> List[Segment]:
        if context.period_duration is None:
            raise ParseError("A single-file representation requires a known period duration")
        segment_map = None
        initialization = _child(context.segment_base, "Initialization")
        if initialization is not None and initialization.get("range"):
            segment_map = SegmentMap(
                uri="",
                resolved_uri=context.base_url,
                byterange=_parse_range(initialization.get("range")),
            )
        return [
            Segment(
                uri="",
                resolved_uri=context.base_url,
                duration=context.period_duration,
                number=0,
                map=segment_map,
            )
        ]
