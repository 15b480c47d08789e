from .pinion_service import PinionService, OPERATIONS

__all__ = ["PinionService", "OPERATIONS"]
