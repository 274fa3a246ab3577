"""Service catalog offered to dealerships."""

MAIN_SERVICES = (
    "N/C Delivery",
    "U/C Delivery",
    "U/C Detail",
    "Clean for Showroom",
    "Full Detail",
    "Custom Service (Other)",
)

ADDITIONAL_SERVICES = (
    "Interior Protection",
    "Exterior Protection",
    "Restore Headlights",
    "Tint Removal",
    "Ozone Odor Removal",
    "Scratch Removal",
    "Engine Bay Cleaning",
    "Pet Hair Removal",
)


def dedupe_services(services, catalog, kind: str) -> list[str]:
    """Keep first occurrence order and reject names outside the catalog."""
    result = []
    for name in services:
        if name not in catalog:
            raise ValueError(f"Unknown {kind} service: {name}")
        if name not in result:
            result.append(name)
    return result
