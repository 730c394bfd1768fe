"""
External integrations.
"""
