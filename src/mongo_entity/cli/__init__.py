"""
mongo-entity Command Line Interface.

Provides record commands against a configured database:
- ping: Check the connection
- read: Read one record by key
- find: List records, optionally filtered on one field
- create: Insert a record
- update: Merge fields into a record
- delete: Delete one record by key
"""

from .commands import cli, main

__all__ = ["cli", "main"]
