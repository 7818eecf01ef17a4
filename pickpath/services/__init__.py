from pickpath.services.labor_service import LaborService, InsufficientPickDataError
from pickpath.services.labor_repository import LaborRepository
from pickpath.services.walk_distance import WalkDistanceEngine

__all__ = [
    "LaborService",
    "InsufficientPickDataError",
    "LaborRepository",
    "WalkDistanceEngine",
]
