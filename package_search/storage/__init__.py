"""
Access to the read-only package repository index.
"""
