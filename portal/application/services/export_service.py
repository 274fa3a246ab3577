"""CSV export of service requests for spreadsheet use."""

import csv
from typing import Iterable

import pandas as pd

from portal.domain.schemas.service_request import ServiceRequestRead

EXPORT_COLUMNS = [
    "Request #",
    "Requested By",
    "Services",
    "Vehicle",
    "Stock/VIN",
    "Due Date/Time",
    "Status",
    "Price",
    "Notes",
]


def _vehicle_label(r: ServiceRequestRead) -> str:
    return " ".join(str(part) for part in (r.year, r.make, r.model) if part)


def requests_to_frame(requests: Iterable[ServiceRequestRead]) -> pd.DataFrame:
    rows = [
        {
            "Request #": r.request_number,
            "Requested By": r.requested_by,
            "Services": "; ".join(r.main_services + r.additional_services),
            "Vehicle": _vehicle_label(r),
            "Stock/VIN": r.stock_vin,
            "Due Date/Time": r.due,
            "Status": r.status.value,
            "Price": f"${r.price:,.2f}",
            "Notes": r.notes or "",
        }
        for r in requests
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_requests_csv(requests: Iterable[ServiceRequestRead]) -> str:
    """Render requests as CSV text with every cell quoted."""
    frame = requests_to_frame(requests)
    return frame.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
