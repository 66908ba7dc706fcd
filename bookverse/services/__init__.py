"""
Services Package

Business logic kept separate from HTTP handling so it can be called from
routers, scripts and tests alike. Services raise bookverse.exceptions
errors, never HTTPException.

Current services:
- books.py: Book CRUD, listing, cascade delete
- reviews.py: Review create/update/delete and queries
- ratings.py: Book rating aggregate recomputation and statistics
- security.py: Password hashing and JWT utilities
- rate_limiter.py: Rate limiting with slowapi
"""
