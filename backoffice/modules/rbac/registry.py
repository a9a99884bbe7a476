"""
Static catalog of permissions and built-in roles.

This is the single source of truth for what a permission key means and what
each built-in role may do when a company has not configured it. Company
overrides live in the role-permission store.
"""
from enum import Enum
from typing import Dict, FrozenSet, List


class Permission(str, Enum):
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    POS_ACCESS = "POS_ACCESS"
    VIEW_TRANSACTIONS = "VIEW_TRANSACTIONS"
    VIEW_PRODUCTS = "VIEW_PRODUCTS"
    MANAGE_PRODUCTS = "MANAGE_PRODUCTS"
    VIEW_CUSTOMERS = "VIEW_CUSTOMERS"
    MANAGE_CUSTOMERS = "MANAGE_CUSTOMERS"
    VIEW_SUPPLIERS = "VIEW_SUPPLIERS"
    MANAGE_SUPPLIERS = "MANAGE_SUPPLIERS"
    VIEW_EMPLOYEES = "VIEW_EMPLOYEES"
    MANAGE_EMPLOYEES = "MANAGE_EMPLOYEES"
    VIEW_INVOICES = "VIEW_INVOICES"
    MANAGE_INVOICES = "MANAGE_INVOICES"
    VIEW_REPORTS = "VIEW_REPORTS"
    MANAGE_SETTINGS = "MANAGE_SETTINGS"
    MANAGE_COMPANY = "MANAGE_COMPANY"


SYSTEM_PERMISSIONS: Dict[Permission, str] = {
    Permission.VIEW_DASHBOARD: "View Dashboard",
    Permission.POS_ACCESS: "Access POS",
    Permission.VIEW_TRANSACTIONS: "View Transactions",
    Permission.VIEW_PRODUCTS: "View Products",
    Permission.MANAGE_PRODUCTS: "Manage Products (Inventory)",
    Permission.VIEW_CUSTOMERS: "View Customers",
    Permission.MANAGE_CUSTOMERS: "Manage Customers",
    Permission.VIEW_SUPPLIERS: "View Suppliers",
    Permission.MANAGE_SUPPLIERS: "Manage Suppliers",
    Permission.VIEW_EMPLOYEES: "View Employees",
    Permission.MANAGE_EMPLOYEES: "Manage Employees",
    Permission.VIEW_INVOICES: "View Invoices",
    Permission.MANAGE_INVOICES: "Manage Invoices",
    Permission.VIEW_REPORTS: "View Reports",
    Permission.MANAGE_SETTINGS: "Manage Settings (Roles & Permissions)",
    Permission.MANAGE_COMPANY: "Manage Company Profile",
}


class DefaultRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    CASHIER = "cashier"


DEFAULT_ROLES: List[str] = [role.value for role in DefaultRole]

ALL_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)

_DEFAULT_MAPPING: Dict[str, FrozenSet[Permission]] = {
    DefaultRole.ADMIN.value: ALL_PERMISSIONS,
    DefaultRole.MANAGER.value: ALL_PERMISSIONS - {
        Permission.MANAGE_EMPLOYEES,
        Permission.MANAGE_SETTINGS,
        Permission.MANAGE_COMPANY,
    },
    DefaultRole.EMPLOYEE.value: frozenset({
        Permission.VIEW_DASHBOARD,
        Permission.POS_ACCESS,
        Permission.VIEW_PRODUCTS,
        Permission.MANAGE_PRODUCTS,
        Permission.VIEW_CUSTOMERS,
        Permission.MANAGE_CUSTOMERS,
        Permission.VIEW_SUPPLIERS,
        Permission.MANAGE_SUPPLIERS,
        Permission.VIEW_INVOICES,
        Permission.MANAGE_INVOICES,
    }),
    DefaultRole.CASHIER.value: frozenset({
        Permission.VIEW_DASHBOARD,
        Permission.POS_ACCESS,
        Permission.VIEW_TRANSACTIONS,
        Permission.VIEW_PRODUCTS,
        Permission.VIEW_CUSTOMERS,
        Permission.VIEW_INVOICES,
        Permission.MANAGE_INVOICES,
    }),
}


def default_permissions(role: str) -> FrozenSet[Permission]:
    """Built-in permission set of a role; roles not shipped with the system get nothing."""
    return _DEFAULT_MAPPING.get(role, frozenset())


def is_known_permission(key: str) -> bool:
    return key in Permission.__members__


def sort_permissions(permissions) -> List[str]:
    """Stable, catalog-ordered list of permission keys."""
    order = {p.value: index for index, p in enumerate(Permission)}
    keys = {p.value if isinstance(p, Permission) else p for p in permissions}
    return sorted(keys, key=lambda k: (order.get(k, len(order)), k))
