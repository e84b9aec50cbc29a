"""Popular locations offered when the device location is unavailable."""

from pydantic import BaseModel


class PopularLocation(BaseModel):
    name: str
    lat: float
    lng: float
    tag: str


# Cities known for their food scene, cafes and dining culture
POPULAR_LOCATIONS: list[PopularLocation] = [
    PopularLocation(name="Mumbai", lat=19.0760, lng=72.8777, tag="Street Food Capital"),
    PopularLocation(name="Delhi", lat=28.6139, lng=77.2090, tag="Food Paradise"),
    PopularLocation(name="Bangalore", lat=12.9716, lng=77.5946, tag="Café Culture"),
    PopularLocation(name="Hyderabad", lat=17.3850, lng=78.4867, tag="Biryani Heaven"),
    PopularLocation(name="Kolkata", lat=22.5726, lng=88.3639, tag="Sweet & Rolls"),
    PopularLocation(name="Pune", lat=18.5204, lng=73.8567, tag="Café Hub"),
    PopularLocation(name="Jaipur", lat=26.9124, lng=75.7873, tag="Royal Cuisine"),
    PopularLocation(name="Lucknow", lat=26.8467, lng=80.9462, tag="Nawabi Food"),
    PopularLocation(name="Amritsar", lat=31.6340, lng=74.8723, tag="Punjabi Delights"),
    PopularLocation(name="Goa", lat=15.2993, lng=74.1240, tag="Beach Cafés"),
]


def find_popular_location(name: str) -> PopularLocation | None:
    lowered = name.strip().lower()
    for location in POPULAR_LOCATIONS:
        if location.name.lower() == lowered:
            return location
    return None
