"""
Data model for inspection use cases.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Tuple


class InspectionType(str, Enum):
    VISUAL = "visual"
    THERMAL = "thermal"
    ACOUSTIC = "acoustic"
    VIBRATION = "vibration"


class Anomaly(str, Enum):
    CRACKS = "cracks"
    HOTSPOTS = "hotspots"
    CORROSION = "corrosion"
    LEAKS = "leaks"
    DELAMINATION = "delamination"
    WEAR = "wear"


# (value, label) pairs in display order
INSPECTION_TYPE_OPTIONS: List[Tuple[str, str]] = [
    (InspectionType.VISUAL.value, "Visual"),
    (InspectionType.THERMAL.value, "Thermal"),
    (InspectionType.ACOUSTIC.value, "Acoustic"),
    (InspectionType.VIBRATION.value, "Vibration"),
]

ANOMALY_OPTIONS: List[Tuple[str, str]] = [
    (Anomaly.CRACKS.value, "Cracks"),
    (Anomaly.HOTSPOTS.value, "Hotspots"),
    (Anomaly.CORROSION.value, "Corrosion"),
    (Anomaly.LEAKS.value, "Leaks"),
    (Anomaly.DELAMINATION.value, "Delamination"),
    (Anomaly.WEAR.value, "Wear"),
]


@dataclass(frozen=True)
class InspectionUseCase:
    """A named pairing of an inspection modality with target anomalies."""
    id: str
    name: str
    inspection_type: InspectionType
    anomalies: List[Anomaly]
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted camelCase layout."""
        return {
            "id": self.id,
            "name": self.name,
            "inspectionType": self.inspection_type.value,
            "anomalies": [a.value for a in self.anomalies],
            "createdAt": self.created_at.isoformat(),
        }


def format_created_at(use_case: InspectionUseCase) -> str:
    """Render the creation timestamp as local date and time for display."""
    local = use_case.created_at.astimezone()
    return f"{local.strftime('%Y-%m-%d')} {local.strftime('%H:%M:%S')}"
