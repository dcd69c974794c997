"""
Core infrastructure for the Library API: settings and logging setup.
"""
