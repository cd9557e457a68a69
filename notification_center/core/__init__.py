"""
Core configuration, errors, logging and event dispatch.
"""
