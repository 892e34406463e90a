from enum import Enum


class Provider(str, Enum):
    """CDN vendors the dashboard knows how to query."""

    CLOUDFLARE = "cloudflare"
    EDGEONE = "edgeone"
    ESA = "esa"

    @classmethod
    def all(cls) -> list["Provider"]:
        return [cls.CLOUDFLARE, cls.EDGEONE, cls.ESA]

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Provider.CLOUDFLARE: "Cloudflare",
    Provider.EDGEONE: "EdgeOne",
    Provider.ESA: "Aliyun ESA",
}
