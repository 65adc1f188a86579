"""
API Routes Package
"""
from fastapi import APIRouter, Depends

from dolu.api.auth import require_staff

from .locations import router as locations_router
from .pricing import router as pricing_router
from .bookings import router as bookings_router
from .contact import router as contact_router
from .settings import router as settings_router
from .auth import router as auth_router
from .admin_bookings import router as admin_bookings_router
from .admin_catalog import locations_router as admin_locations_router
from .admin_catalog import pricing_router as admin_pricing_router
from .admin_catalog import item_categories_router as admin_item_categories_router
from .admin_messaging import messages_router as admin_messages_router
from .admin_messaging import templates_router as admin_templates_router
from .admin_messaging import message_logs_router as admin_message_logs_router
from .admin_settings import router as admin_settings_router

# Customer-facing routes (no credentials)
public_router = APIRouter()

public_router.include_router(locations_router, prefix="/locations", tags=["Locations"])
public_router.include_router(pricing_router, tags=["Pricing"])
public_router.include_router(bookings_router, prefix="/bookings", tags=["Bookings"])
public_router.include_router(contact_router, prefix="/contact", tags=["Contact"])
public_router.include_router(settings_router, prefix="/settings", tags=["Settings"])
public_router.include_router(auth_router, prefix="/auth", tags=["Auth"])

# Staff console routes (bearer token)
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_staff)])

admin_router.include_router(admin_bookings_router, prefix="/bookings", tags=["Admin Bookings"])
admin_router.include_router(admin_pricing_router, prefix="/pricing", tags=["Admin Pricing"])
admin_router.include_router(admin_locations_router, prefix="/locations", tags=["Admin Locations"])
admin_router.include_router(admin_item_categories_router, prefix="/item-categories", tags=["Admin Item Categories"])
admin_router.include_router(admin_messages_router, prefix="/messages", tags=["Admin Messages"])
admin_router.include_router(admin_templates_router, prefix="/templates", tags=["Admin Templates"])
admin_router.include_router(admin_message_logs_router, prefix="/message-logs", tags=["Admin Message Logs"])
admin_router.include_router(admin_settings_router, prefix="/settings", tags=["Admin Settings"])

api_router = APIRouter()
api_router.include_router(public_router)
api_router.include_router(admin_router)
