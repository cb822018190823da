"""Bookings app package.

This app encapsulates the booking domain: time-windowed requests for a
parking spot, the overlap check run inside a transaction with row locks
where the database supports them, the status state machine and the
periodic sweeps that expire unapproved requests and release no-shows.
"""
