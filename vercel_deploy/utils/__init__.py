"""Utility functions for the deploy pipeline."""

from vercel_deploy.utils.logging import configure_logging, get_logger
from vercel_deploy.utils.text import mask_secrets, slugify, truncate_tail

__all__ = [
    "configure_logging",
    "get_logger",
    "mask_secrets",
    "slugify",
    "truncate_tail",
]
