"""
Chapter portal application package.
"""
