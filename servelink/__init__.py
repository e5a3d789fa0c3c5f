"""
                        ServeLink

Restaurant ordering and management backend: QR menus and cart checkout
for customers, kitchen and waiter queues for staff, and an owner
dashboard for menu, tables, staff and analytics.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
