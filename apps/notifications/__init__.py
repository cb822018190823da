"""Notifications app package.

Delivers account and booking notifications by email and keeps an in-app
inbox per user. Booking notifications are dispatched from Celery tasks in
``apps.bookings.tasks`` so the request cycle never waits on SMTP.
"""
