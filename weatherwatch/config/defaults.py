"""Default tracked locations, used until the store holds a registry."""

DEFAULT_LOCATIONS: list[str] = [
    "Delhi",
    "Mumbai",
    "Chennai",
    "Bangalore",
    "Kolkata",
    "Hyderabad",
]
