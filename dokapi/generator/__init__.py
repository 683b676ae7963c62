"""Render dokapi books into a multi-page site or a single HTML page."""

from .engine import GenerationEngine
from .images import ImageRegistry, collect_image_references, copy_images
from .models import ImageReference, RenderContext
from .renderer import HtmlContentRenderer
from .strategies import OutputStrategy, PageOutput, SiteOutput, strategy_for
from .template import TemplateRenderer

__all__ = [
    "GenerationEngine",
    "HtmlContentRenderer",
    "ImageReference",
    "ImageRegistry",
    "OutputStrategy",
    "PageOutput",
    "RenderContext",
    "SiteOutput",
    "TemplateRenderer",
    "collect_image_references",
    "copy_images",
    "strategy_for",
]
