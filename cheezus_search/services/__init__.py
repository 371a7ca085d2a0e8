"""
Service layer - Search orchestration.
"""
