"""
                Restaurant Order Desk

Dine-in ordering backend: menu, table orders, active order board and
staff accounts over HTTP, backed by a relational database.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
