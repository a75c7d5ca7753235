"""Ingest stages: ticker resolution, submissions catalog, selection, download.

All network access goes through a shared `Dispatcher`.
"""
