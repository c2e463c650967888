"""
Database Management Scripts

This module contains utilities for database operations:
- Trail upserts and schema creation
- Database reset and content checks
- Featured trail selection
"""
