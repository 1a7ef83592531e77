"""
Infrastructure layer: concrete endpoints
"""
