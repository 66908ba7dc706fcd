"""
BookVerse API Application Package

A community book catalogue: readers share books, review them, and every
book carries an always-current average rating and review count.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Domain errors raised by the service layer
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (books, reviews, rating aggregation, security)
"""

__version__ = "0.1.0"
