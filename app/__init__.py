# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the FastAPI web application:
# - main.py: App factory, middleware order, error handlers, lifespan
# - config.py: Environment variable loading and settings
# - middleware.py: Reconnect-on-demand connection check
# - routers/: Default root router (info + health checks)
#
# The app layer is thin - the database connection itself is owned by
# lib/database.py.
# =============================================================================
