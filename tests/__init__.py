"""
Test Suite for BookVerse API

Test Organization:
- conftest.py: Shared fixtures (test database, client, sample data)
- test_ratings.py: Rating aggregate maintenance
- test_reviews.py: Review endpoints and service
- test_books.py: Book endpoints and service
- test_auth.py / test_users.py / test_admin.py: Remaining routers
- test_main.py: Health endpoints and error format

Running Tests:
    pytest
    pytest --cov=bookverse --cov-report=html
    pytest tests/test_ratings.py -v
"""
