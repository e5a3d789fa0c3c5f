"""
                        Services Module

Business logic shared by the HTTP routers and the client package.

Services:
    - realtime: change feed (in-memory or Redis pub/sub)
    - qr: table QR code encoding
    - order_workflow: order status transitions and partitions
    - restaurants: restaurant resolution and role routing
    - analytics: owner dashboard statistics
"""
