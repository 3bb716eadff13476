"""
Core object storage logic.

This module is framework-agnostic - it doesn't import FastAPI, httpx,
or touch the filesystem. Storage backends implement the ObjectStore
protocol defined here.
"""
