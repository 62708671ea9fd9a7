"""
Feature modules for the LEL tracker.

Each feature is a self-contained module with:
- models.py - dataclasses (no I/O)
- schemas.py - Pydantic models for feed payloads (optional)
- the computation or client module(s) for the feature
"""
