# Overview: Default role -> permission mapping seeded into every new business's settings.

# Owner is implicitly allowed everything (see services/permission_service.py);
# its list exists so the settings screen can show it.
DEFAULT_ROLE_PERMISSIONS = {
    "Owner": [
        "view_dashboard", "view_reports", "manage_settings", "manage_staff",
        "manage_inventory", "manage_services", "manage_customers", "process_sale",
        "process_refund", "view_all_appointments", "view_own_appointments",
        "create_appointment", "view_all_commissions",
    ],
    "Manager": [
        "view_dashboard", "view_reports", "manage_staff", "manage_inventory",
        "manage_services", "manage_customers", "process_sale", "process_refund",
        "view_all_appointments", "create_appointment", "view_all_commissions",
    ],
    "Barber": [
        "view_dashboard", "view_own_appointments", "create_appointment",
        "process_sale", "manage_customers",
    ],
    "Cashier": [
        "view_dashboard", "process_sale", "manage_customers",
        "view_all_appointments", "create_appointment", "manage_inventory",
    ],
}
