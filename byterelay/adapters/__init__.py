"""
Adapters: CLI and configuration front-ends
"""
