"""Vercel Deploy Pipeline - build, deploy and report web projects from CI."""

__version__ = "0.1.0"
