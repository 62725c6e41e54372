"""
Project package: settings, URLs and shared security helpers.
"""
