# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


DASHBOARD_PERMISSIONS = [
    ("view_dashboard", "View Dashboard", "See the daily summary screen", PermissionCategory.DASHBOARD),
    ("view_reports", "View Reports", "View sales reports and the audit log", PermissionCategory.DASHBOARD),
    ("view_all_commissions", "View All Commissions", "See commission earned by every staff member", PermissionCategory.DASHBOARD),
]

SALES_PERMISSIONS = [
    ("process_sale", "Process Sale", "Ring up sales at the POS", PermissionCategory.SALES),
    ("process_refund", "Process Refund", "Refund completed transactions", PermissionCategory.SALES),
]

BOOKING_PERMISSIONS = [
    ("view_all_appointments", "View All Appointments", "See every staff member's bookings", PermissionCategory.BOOKINGS),
    ("view_own_appointments", "View Own Appointments", "See bookings assigned to yourself", PermissionCategory.BOOKINGS),
    ("create_appointment", "Create Appointment", "Book, reschedule, complete or cancel appointments", PermissionCategory.BOOKINGS),
]

CATALOG_PERMISSIONS = [
    ("manage_inventory", "Manage Inventory", "Create products and change stock", PermissionCategory.CATALOG),
    ("manage_services", "Manage Services", "Create and price services", PermissionCategory.CATALOG),
]

PEOPLE_PERMISSIONS = [
    ("manage_staff", "Manage Staff", "Hire, edit and remove staff", PermissionCategory.PEOPLE),
    ("manage_customers", "Manage Customers", "Create and edit customer records", PermissionCategory.PEOPLE),
]

SYSTEM_PERMISSIONS = [
    ("manage_settings", "Manage Settings", "Change shop, payment and role settings", PermissionCategory.SYSTEM),
]

PERMISSION_DEFINITIONS = (
    DASHBOARD_PERMISSIONS
    + SALES_PERMISSIONS
    + BOOKING_PERMISSIONS
    + CATALOG_PERMISSIONS
    + PEOPLE_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
