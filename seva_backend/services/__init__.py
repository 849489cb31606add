from .activities import ActivityService
from .complaints import ComplaintService

__all__ = ["ActivityService", "ComplaintService"]
