"""Shared helpers for the bookstore API."""
