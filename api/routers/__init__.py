"""
API Routers for Summons Assist.

Organized by domain:
- summons: Extraction, enrichment and narrative for court summonses
"""

from routers.summons import router as summons_router

__all__ = [
    "summons_router",
]
