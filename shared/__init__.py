"""
Shared models, constants and data files for the sync tool.
"""
