"""Localization: per-language labels collapsed to one string per request.

Also decides whether a column is available in the requested language.
"""
