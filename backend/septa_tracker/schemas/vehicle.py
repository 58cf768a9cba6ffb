from pydantic import BaseModel


class NormalizedVehicle(BaseModel):
    lat: float
    lon: float
    route_label: str
    vehicle_id: str
    direction: str
    destination: str
    delay_minutes: int = 0
    service: str | None = None
    track: str | None = None


class VehiclesResponse(BaseModel):
    vehicles: list[NormalizedVehicle]


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
