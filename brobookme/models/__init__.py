from .tables import Base, Bookings, Providers, metadata

__all__ = ["Base", "Bookings", "Providers", "metadata"]
