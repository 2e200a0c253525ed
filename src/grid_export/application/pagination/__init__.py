"""Application pagination – offset page primitives used for batched row fetches."""
from grid_export.application.pagination.page_request import PageRequest
from grid_export.application.pagination.page import Page

__all__ = ["Page", "PageRequest"]
