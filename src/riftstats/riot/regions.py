"""
Region to routing value / platform id mappings.

Account and match endpoints live on regional routing hosts
(europe, americas, asia, sea); summoner, league and spectator
endpoints live on platform hosts (euw1, na1, ...).
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_ROUTING = "europe"
DEFAULT_PLATFORM = "euw1"


@dataclass(frozen=True)
class RegionRoute:
    """Hosts serving one region."""

    region: str
    platform: str
    routing: str

    def platform_host(self) -> str:
        return f"https://{self.platform}.api.riotgames.com"

    def routing_host(self) -> str:
        return f"https://{self.routing}.api.riotgames.com"


_REGIONS: dict[str, tuple[str, str]] = {
    # region: (platform, routing)
    "EUW": ("euw1", "europe"),
    "EUNE": ("eun1", "europe"),
    "TR": ("tr1", "europe"),
    "RU": ("ru", "europe"),
    "NA": ("na1", "americas"),
    "BR": ("br1", "americas"),
    "LAN": ("la1", "americas"),
    "LAS": ("la2", "americas"),
    "KR": ("kr", "asia"),
    "JP": ("jp1", "asia"),
    "OCE": ("oc1", "sea"),
    "PH": ("ph2", "sea"),
    "SG": ("sg2", "sea"),
    "TH": ("th2", "sea"),
    "TW": ("tw2", "sea"),
    "VN": ("vn2", "sea"),
}

# Platform ids are accepted as region names too (EUW1, NA1, ...)
_ALIASES: dict[str, str] = {platform.upper(): region for region, (platform, _) in _REGIONS.items()}


def known_regions() -> list[str]:
    return list(_REGIONS)


def resolve_region(region: str | None) -> RegionRoute:
    """Resolve a region name (case-insensitive) to its hosts.

    Unknown regions fall back to EUW.
    """
    name = (region or "").strip().upper()
    name = _ALIASES.get(name, name)
    platform, routing = _REGIONS.get(name, (DEFAULT_PLATFORM, DEFAULT_ROUTING))
    return RegionRoute(region=name if name in _REGIONS else "EUW", platform=platform, routing=routing)
