"""
API Routers Package

This package contains FastAPI routers that handle API endpoints.

Router Structure:
- auth.py: /api/v1/auth/* endpoints (registration, login, token refresh)
- books.py: /api/v1/books/* endpoints, including a book's reviews and rating
- reviews.py: /api/v1/reviews/* endpoints (single review read/update/delete)
- users.py: /api/v1/users/* endpoints (public profiles)
- admin.py: /api/v1/admin/* maintenance endpoints (non-production only)

Each router is imported and registered in main.py.
"""

from bookverse.routers.admin import router as admin_router
from bookverse.routers.auth import router as auth_router
from bookverse.routers.books import router as books_router
from bookverse.routers.reviews import router as reviews_router
from bookverse.routers.users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "books_router",
    "reviews_router",
    "users_router",
]
