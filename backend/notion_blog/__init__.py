# backend/notion_blog/__init__.py
"""
Notion blog data package.

This package contains:
- notion: Notion data-source query, property flattening and block rendering
- main: FastAPI application exposing the flattened posts
- cli: JSON export for the static-site build
"""
