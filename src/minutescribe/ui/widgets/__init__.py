"""Reusable UI widgets"""

from .sidebar import SidebarWidget
from .preview_panel import PreviewPanel

__all__ = ["SidebarWidget", "PreviewPanel"]
