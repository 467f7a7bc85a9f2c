"""Adapters layer - Connections to external formats.

- Network and configuration file readers (parsers)
- Traffic simulator control-channel messages (messaging)
"""
