"""
Luxgrid I/O Module

Request file and photometry file loading.
"""

from luxgrid.io.request import (
    load_ies_file,
    load_request,
    request_from_dict,
)

__all__ = [
    "load_ies_file",
    "load_request",
    "request_from_dict",
]
