"""
Application utility helpers.
"""
