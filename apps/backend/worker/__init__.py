"""
Headless-browser scrape worker service.

Run with: uvicorn worker.main:build_default_app --factory
"""
