"""API routes package.

Routers are organized by domain:

- health: Health check endpoints
- posts: Posts and their package settings
- packages: Package management, catalog and suggestions
- bookings: Availability, bookings and invites
- estimates: Pricing and confirmation
- subscription: Billing entitlement check

All routers are registered in main.py with /api prefix.
"""

from plek_api.routes.bookings import router as bookings_router
from plek_api.routes.estimates import router as estimates_router
from plek_api.routes.health import router as health_router
from plek_api.routes.packages import router as packages_router
from plek_api.routes.posts import router as posts_router
from plek_api.routes.subscription import router as subscription_router

__all__ = [
    "bookings_router",
    "estimates_router",
    "health_router",
    "packages_router",
    "posts_router",
    "subscription_router",
]
