"""
Configuration adapter
"""
