# tourdesk/routers/__init__.py

from . import auth, bookings, health, invoices, payments, settings, users

__all__ = ["auth", "bookings", "health", "invoices", "payments", "settings", "users"]
