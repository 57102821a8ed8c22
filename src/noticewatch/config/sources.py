"""Built-in catalogue of announcement sources."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from noticewatch.domain.types import ScrapeOrder, SourceSpec

from .env import env_list
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

ENABLED_SOURCES_ENV = "NOTICEWATCH_ENABLED_SOURCES"
FIRE_DISPATCH_SEPARATOR = "_"

DEFAULT_SOURCES: tuple[SourceSpec, ...] = (
    SourceSpec(
        name="hinet",
        display_name="HiNet 服務公告",
        url="https://search.hinet.net/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="seednet",
        display_name="Seednet 重要公告",
        url="https://service.seed.net.tw/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="jyb",
        display_name="巧巧郎",
        url="https://www.kkren.com.tw/",
        message_thread_id=19,
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="costco",
        display_name="好市多",
        url="https://www.costco.com.tw/Newspage",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="cpc",
        display_name="台灣中油",
        url="https://www.cpc.com.tw/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="smc",
        display_name="台灣海纜動態",
        url="https://smc.peering.tw/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="elf",
        display_name="ELF 最新消息",
        url="https://www.elf.com.tw/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="fet",
        display_name="遠傳電信公告",
        url="https://www.fetnet.net/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="homeplus",
        display_name="Homeplus 系統公告",
        url="https://www.homeplus.net.tw/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="taiwanmobile",
        display_name="台灣大哥大服務公告",
        url="https://www.taiwanmobile.com/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="tpcfd",
        display_name="台北消防出勤",
        url="https://service119.tfd.gov.tw/",
        event_prefix_separator=FIRE_DISPATCH_SEPARATOR,
        supports_message_edit=True,
    ),
    SourceSpec(
        name="tncfd",
        display_name="台南消防出勤",
        url="https://119dts.tncfd.gov.tw/DTS/caselist/html",
        event_prefix_separator=FIRE_DISPATCH_SEPARATOR,
        supports_message_edit=True,
    ),
    SourceSpec(
        name="tccfd",
        display_name="台中消防出勤",
        url="https://www.fire.taichung.gov.tw/caselist/index.asp?Parser=99,8,226,,,,,,,,1",
        event_prefix_separator=FIRE_DISPATCH_SEPARATOR,
        supports_message_edit=True,
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
    SourceSpec(
        name="ntpcfd",
        display_name="新北消防出勤",
        url="https://e.ntpc.gov.tw/",
        scrape_order=ScrapeOrder.NEWEST_FIRST,
    ),
)


def source_names(specs: Iterable[SourceSpec] = DEFAULT_SOURCES) -> list[str]:
    return [spec.name for spec in specs]


def get_source_specs(
    *,
    only: Iterable[str] | None = None,
    catalogue: tuple[SourceSpec, ...] = DEFAULT_SOURCES,
) -> list[SourceSpec]:
    """Return the catalogue with enabled flags applied.

    ``NOTICEWATCH_ENABLED_SOURCES`` replaces the catalogue defaults; ``only``
    (the CLI's ``--only``) further restricts the run to the named sources.
    """

    known = set(source_names(catalogue))
    enabled_override = env_list(ENABLED_SOURCES_ENV)
    selected = list(only) if only is not None else None
    for names in (enabled_override, selected):
        unknown = sorted(set(names or ()) - known)
        if unknown:
            raise ConfigurationError(f"Unknown source(s): {', '.join(unknown)}")

    specs: list[SourceSpec] = []
    for spec in catalogue:
        enabled = spec.enabled if enabled_override is None else spec.name in enabled_override
        if selected is not None:
            enabled = enabled and spec.name in selected
        specs.append(spec if enabled == spec.enabled else replace(spec, enabled=enabled))
    return specs


def get_source_spec(name: str, catalogue: tuple[SourceSpec, ...] = DEFAULT_SOURCES) -> SourceSpec:
    for spec in catalogue:
        if spec.name == name:
            return spec
    raise ConfigurationError(f"Unknown source: {name}")
