# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and settings UI display."""
    DASHBOARD = "DASHBOARD"
    SALES = "SALES"
    BOOKINGS = "BOOKINGS"
    CATALOG = "CATALOG"
    PEOPLE = "PEOPLE"
    SYSTEM = "SYSTEM"
