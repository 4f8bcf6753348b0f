"""
Content Mutation Pipeline for lesson content

This package decides whether a content submission (manual authoring or AI
draft) becomes the new persisted version of a topic's content, reverts to the
prior version, or is discarded.

**Version**: 0.1.0
**Python**: >=3.11
**Key Dependencies**: pydantic, instructor, openai, python-dotenv
"""

__version__ = "0.1.0"
__author__ = "Content Studio"

# Lesson formats, keyed by their numeric id
CONTENT_FORMATS = {
    1: "text",
    2: "code",
    3: "presentation",
    4: "audio",
    5: "mind_map",
    6: "avatar_video",
}

__all__ = [
    "__version__",
    "__author__",
    "CONTENT_FORMATS",
]
