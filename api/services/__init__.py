"""
Services for Summons Assist API.

Model access and document handling.
"""

from services.llm_json import LLMJsonClient
from services.summons_parser import SummonsParserService

__all__ = [
    "LLMJsonClient",
    "SummonsParserService",
]
