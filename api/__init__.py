"""
FastAPI RESTful API for the Bookstore.

This module provides a REST API for:
- Listing, reading, creating, updating and deleting books
- Strict validation of book payloads before storage is touched
- Relational storage keyed by isbn
"""
