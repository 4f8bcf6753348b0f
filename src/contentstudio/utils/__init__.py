"""
Shared utilities for the content mutation pipeline.

- llm_client.py: Instructor-wrapped OpenAI client with retry logic
- logging_config.py: Structured JSON logging and per-stage timing
- content_types.py: Loose content type identifier matching
- text_extraction.py: Text views of content payloads
- content_data_cleaner.py: Redundant field stripping before storage
- language_utils.py: Language code normalization
"""

__all__ = [
    "llm_client",
    "logging_config",
    "content_types",
    "text_extraction",
    "content_data_cleaner",
    "language_utils",
]
