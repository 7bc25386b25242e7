"""
Expense Bot - Source Package

A chat bot for recording expenses into a Notion database and reading
back spending summaries.

DESIGN PRINCIPLES:
1. One field per message, validated before moving on
2. Nothing is saved until the entry is complete
3. Store failures become replies, never crashes
4. Every step is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Bot Team"
