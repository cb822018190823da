"""Users app package.

Defines the custom user model (``apps.users.models.User``, the project's
AUTH_USER_MODEL), registration, email verification, JWT login and the
password reset flow.
"""
