from pydantic import BaseModel, Field

from .models import SeriesPoint, TopNEntry


class EdgeOneZone(BaseModel):
    zone_id: str
    zone_name: str
    status: str = ""
    active_status: str = ""
    display_status: str = ""
    type: str = ""
    area: str = ""
    paused: bool = False
    cname_status: str = ""
    name_servers: list[str] = Field(default_factory=list)
    original_name_servers: list[str] = Field(default_factory=list)
    create_time: str = ""


class TrafficOverview(BaseModel):
    total_flux: int | float = 0
    total_requests: int | float = 0
    total_bandwidth: int | float = 0
    total_hits: int | float = 0

    def merge(self, other: "TrafficOverview") -> "TrafficOverview":
        return TrafficOverview(
            total_flux=self.total_flux + other.total_flux,
            total_requests=self.total_requests + other.total_requests,
            total_bandwidth=self.total_bandwidth + other.total_bandwidth,
            total_hits=self.total_hits + other.total_hits,
        )


class EdgeOneAccount(BaseModel):
    name: str
    zones: list[EdgeOneZone] = Field(default_factory=list)
    overview: TrafficOverview = Field(default_factory=TrafficOverview)
    error: str | None = None


class EdgeOneZonesReport(BaseModel):
    accounts: list[EdgeOneAccount] = Field(default_factory=list)
    zones: list[EdgeOneZone] = Field(default_factory=list)
    overview: TrafficOverview = Field(default_factory=TrafficOverview)


class EdgeOneTraffic(BaseModel):
    account: str
    metric: str
    action: str
    zone_ids: list[str] = Field(default_factory=list)
    start_time: str
    end_time: str
    interval: str | None = None
    series: list[SeriesPoint] = Field(default_factory=list)
    top: list[TopNEntry] = Field(default_factory=list)
    total: int | float = 0
    error: str | None = None
