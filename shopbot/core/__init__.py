"""
Core shop logic: catalog, conversation flow and analytics.
"""
