from pickpath.models.layout import (
    MarkerType,
    RouteMarker,
    WarehouseElement,
    PickTransaction,
    Item,
    ItemPickTransaction,
)
from pickpath.models.labor import (
    LaborStandard,
    LaborPerformance,
    StaffingForecast,
    ROISimulation,
)

__all__ = [
    "MarkerType",
    "RouteMarker",
    "WarehouseElement",
    "PickTransaction",
    "Item",
    "ItemPickTransaction",
    "LaborStandard",
    "LaborPerformance",
    "StaffingForecast",
    "ROISimulation",
]
