"""Concrete announcement sources and their registry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .base import HttpDetailSource, HttpSource, SourceFormatError, md5_hex, strip_html
from .costco import CostcoSource
from .cpc import CpcSource
from .elf import ElfSource
from .fet import FetSource
from .hinet import HinetSource
from .homeplus import HomeplusSource
from .jyb import JybSource
from .ntpcfd import NtpcfdSource
from .seednet import SeednetSource
from .smc import SmcSource
from .taiwanmobile import TaiwanMobileSource
from .tccfd import TccfdSource
from .tncfd import TncfdSource
from .tpcfd import TpcfdSource

if TYPE_CHECKING:
    from noticewatch.domain.ports.sources import Source
    from noticewatch.domain.types import SourceSpec

SOURCE_TYPES: Final[dict[str, type[HttpSource]]] = {
    source_type.name: source_type
    for source_type in (
        HinetSource,
        SeednetSource,
        JybSource,
        CostcoSource,
        CpcSource,
        SmcSource,
        ElfSource,
        FetSource,
        HomeplusSource,
        TaiwanMobileSource,
        TpcfdSource,
        TncfdSource,
        TccfdSource,
        NtpcfdSource,
    )
}


class UnknownSourceError(LookupError):
    """Raised when no adapter is registered under a source name."""


def build_source(spec: SourceSpec) -> Source:
    try:
        source_type = SOURCE_TYPES[spec.name]
    except KeyError:
        raise UnknownSourceError(f"No source adapter named {spec.name!r}") from None
    return source_type()


__all__ = [
    "SOURCE_TYPES",
    "CostcoSource",
    "CpcSource",
    "ElfSource",
    "FetSource",
    "HinetSource",
    "HomeplusSource",
    "HttpDetailSource",
    "HttpSource",
    "JybSource",
    "NtpcfdSource",
    "SeednetSource",
    "SmcSource",
    "SourceFormatError",
    "TaiwanMobileSource",
    "TccfdSource",
    "TncfdSource",
    "TpcfdSource",
    "UnknownSourceError",
    "build_source",
    "md5_hex",
    "strip_html",
]
