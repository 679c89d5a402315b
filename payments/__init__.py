"""
Payments app package for the EatMeetClub backend.

This package provides the ticket model and API endpoints for buying
event tickets through Stripe Checkout, verifying payments and handling
Stripe webhook callbacks.  See payments/views.py for API details.
"""
