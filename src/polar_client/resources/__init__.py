"""Endpoint groups, one per Polar resource family."""

from polar_client.resources.base import ExportFormat, ResourceEndpoints
from polar_client.resources.commerce import (
    CheckoutLinks,
    Checkouts,
    Discounts,
    Orders,
    Payments,
    Products,
    Refunds,
    Subscriptions,
)
from polar_client.resources.customers import (
    CustomerMeters,
    Customers,
    CustomerSeats,
    CustomerSessions,
    LicenseKeys,
    Seats,
)
from polar_client.resources.platform import (
    Benefits,
    CustomFields,
    Events,
    Files,
    Meters,
    Metrics,
    Organizations,
    Webhooks,
)
from polar_client.resources.portal import (
    PortalBenefitGrants,
    PortalCustomer,
    PortalDownloadables,
    PortalLicenseKeys,
    PortalOrders,
    PortalOrganization,
    PortalSubscriptions,
)

__all__ = [
    "Benefits",
    "CheckoutLinks",
    "Checkouts",
    "CustomFields",
    "CustomerMeters",
    "CustomerSeats",
    "CustomerSessions",
    "Customers",
    "Discounts",
    "Events",
    "ExportFormat",
    "Files",
    "LicenseKeys",
    "Meters",
    "Metrics",
    "Orders",
    "Organizations",
    "Payments",
    "PortalBenefitGrants",
    "PortalCustomer",
    "PortalDownloadables",
    "PortalLicenseKeys",
    "PortalOrders",
    "PortalOrganization",
    "PortalSubscriptions",
    "Products",
    "Refunds",
    "ResourceEndpoints",
    "Seats",
    "Subscriptions",
    "Webhooks",
]
