"""New Taipei City Fire Department rescue map layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from noticewatch.domain.types import Record

from .base import HttpSource, SourceFormatError, escape, get_json, link, local_time, now_local

if TYPE_CHECKING:
    from collections.abc import Callable

    from noticewatch.adapters.http_resilience import ResilientClient
    from noticewatch.domain.types import SourceSpec

RESCUE_LAYER_URL: Final[str] = "https://e.ntpc.gov.tw/v3/api/map/dynamic/layer/rescue"
MAP_URL: Final[str] = "https://www.google.com/maps?q={lat},{lng}"

AMBULANCE_TYPE: Final[str] = "AmbulanceBack"
UNKNOWN_KIND: Final[str] = "未知案件"
UNKNOWN_PLACE: Final[str] = "未知地點"


class LayerEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: int | None = None
    message: str | None = None
    data: str | None = None


class FeatureProperties(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    feature_id: str | None = Field(default=None, alias="featureId")
    fire_type: str | None = Field(default=None, alias="fireType")
    type: str | None = None
    place: str | None = Field(default=None, alias="endPointInfo")
    lat: str | None = None
    lng: str | None = None

    @property
    def kind(self) -> str:
        if self.fire_type:
            return self.fire_type
        return "救護案件" if self.type == AMBULANCE_TYPE else UNKNOWN_KIND


class Feature(BaseModel):
    model_config = ConfigDict(extra="ignore")

    properties: FeatureProperties | None = None


class FeatureCollection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    features: list[Feature]


def accepted_at(feature_id: str, now: datetime) -> datetime:
    """Date encoded as ``YYMMDD`` at the head of the id, at the current time of day.

    Ids without a plausible date fall back to ``now``.
    """

    head = feature_id[:6]
    if len(head) < 6 or not head.isdigit():
        return now
    year, month, day = int(head[:2]), int(head[2:4]), int(head[4:6])
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return now
    try:
        return now.replace(year=2000 + year, month=month, day=day, microsecond=0)
    except ValueError:
        return now


def parse_rescue_layer(payload: object, *, now: Callable[[], datetime] = now_local) -> list[Record]:
    """Records keyed by feature id, in the order the layer lists them."""

    try:
        envelope = LayerEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise SourceFormatError(f"Unexpected NTPCFD payload: {exc}") from exc
    if envelope.status != 200 or not envelope.data:
        raise SourceFormatError(f"NTPCFD layer error: {envelope.message}")
    try:
        collection = FeatureCollection.model_validate_json(envelope.data)
    except ValidationError as exc:
        raise SourceFormatError(f"Unexpected NTPCFD layer data: {exc}") from exc

    current = now()
    records: list[Record] = []
    for feature in collection.features:
        props = feature.properties
        if props is None or not props.feature_id:
            continue
        place = props.place or UNKNOWN_PLACE
        records.append(
            Record(
                id=props.feature_id,
                title=f"{place} - {props.kind}",
                timestamp=accepted_at(props.feature_id, current).isoformat(),
                url=MAP_URL.format(lat=props.lat, lng=props.lng) if props.lat and props.lng else "",
                fields={"type": props.kind, "location": place},
            )
        )
    return records


@dataclass(slots=True)
class NtpcfdSource(HttpSource):
    name: ClassVar[str] = "ntpcfd"

    async def fetch_records(self, client: ResilientClient) -> list[Record]:
        return parse_rescue_layer(await get_json(client, RESCUE_LAYER_URL))

    def build_message(self, record: Record, spec: SourceSpec) -> str:
        kind = record.get("type")
        type_emoji = "🚑" if "救護" in kind or kind == AMBULANCE_TYPE else "🚒"
        header = f"{type_emoji} {link(spec.url or RESCUE_LAYER_URL, spec.display_name)}"
        lines = [
            f"{header} | 執行中 🚨",
            "",
            f"📍 <b>{escape(record.get('location'))}</b> ({escape(kind)})",
            f"案件編號: {escape(record.id)}",
            f"受理時間: {local_time(record.timestamp, '%Y/%m/%d %H:%M:%S') or ''}",
        ]
        if record.url:
            lines.append(link(record.url, "查看地圖"))
        return "\n".join(lines)
