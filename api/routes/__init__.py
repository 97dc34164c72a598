"""Route handlers following Single Responsibility Principle

Each router module handles a single resource/concept:
- randos: versioned rando search endpoints
- health: health/monitoring endpoints
"""
