from .client import REQUIRED_COOKIES, PortalClient, build_request
from .parser import parse_classes, parse_semester, parse_student_id

__all__ = [
    "REQUIRED_COOKIES",
    "PortalClient",
    "build_request",
    "parse_classes",
    "parse_semester",
    "parse_student_id",
]
