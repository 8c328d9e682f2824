"""
Domain types shared by the storage, service and API layers.

This package is responsible for:
* The ordered row projection and its JSON encoding.
* The exception hierarchy that the API layer maps onto HTTP responses.
"""
