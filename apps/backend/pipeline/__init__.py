"""
Job content extraction pipeline.

Turns a job posting URL or raw HTML/text into a validated ParsedJobData
using site plugins first and an LLM as fallback.
"""

__version__ = "1.0.0"
