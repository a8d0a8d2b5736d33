"""
Summons assist pipeline: extract, select and gather, compose.
"""
