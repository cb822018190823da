"""Notification services for sending emails and in-app messages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking
    from apps.users.models import User

logger = logging.getLogger(__name__)


def _format_dt(value) -> str:  # type: ignore
    return timezone.localtime(value).strftime("%Y-%m-%d %H:%M")


def _display_name(user: "User") -> str:
    return user.first_name or user.username or user.email


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, html_message: str) -> bool:
    """
    Send a single HTML email with a plain-text alternative.

    Returns:
        bool: True if the message was handed to the mail backend
    """
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _build_link(path: str, token: str) -> str:
    base_url = settings.PARKING["BASE_URL"].rstrip("/")
    return f"{base_url}{path}?{urlencode({'token': token})}"


def build_verification_link(token: str) -> str:
    return _build_link("/api/users/verify-email/", token)


def build_password_reset_link(token: str) -> str:
    return _build_link("/api/users/reset-password/", token)


def send_verification_email(user: "User", token: str) -> bool:
    """Send the email address confirmation link after registration."""
    link = build_verification_link(token)
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {_display_name(user)}!</h2>
        <p>Thanks for signing up for ParkingHub. Please confirm your email address:</p>
        <p><a href="{link}">{link}</a></p>
        <p>The link is valid for 24 hours.</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=user.email,
        subject="Verify your ParkingHub email",
        html_message=html_message,
    )


def send_password_reset_email(user: "User", token: str) -> bool:
    """Send the one-shot password reset token and a link carrying it."""
    link = build_password_reset_link(token)
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {_display_name(user)}!</h2>
        <p>We received a request to reset your password. Use this link:</p>
        <p><a href="{link}">{link}</a></p>
        <p>Or submit this token to the reset form: <strong>{token}</strong></p>
        <p>The token expires in one hour. If you did not request a reset, ignore this email.</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=user.email,
        subject="ParkingHub password reset",
        html_message=html_message,
    )


def _booking_summary(booking: "Booking") -> str:
    return f"""
        <ul>
            <li><strong>Ticket:</strong> {booking.ticket_number or "-"}</li>
            <li><strong>Spot:</strong> {booking.spot.spot_number}</li>
            <li><strong>From:</strong> {_format_dt(booking.start_time)}</li>
            <li><strong>To:</strong> {_format_dt(booking.end_time)}</li>
            <li><strong>Expected cost:</strong> {booking.expected_cost}</li>
        </ul>
    """


def send_booking_approved_email(booking: "Booking") -> bool:
    subject = f"Booking {booking.ticket_number} approved"
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {_display_name(booking.user)}!</h2>
        <p>Your parking booking has been approved.</p>
        {_booking_summary(booking)}
        <p>Show the ticket number at the entrance. Check-in opens 15 minutes before the start time.</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=booking.user.email,
        subject=subject,
        html_message=html_message,
    )


def send_booking_rejected_email(booking: "Booking") -> bool:
    reason = booking.cancellation_reason or "Not specified"
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {_display_name(booking.user)}!</h2>
        <p>Unfortunately your booking for spot {booking.spot.spot_number} was rejected.</p>
        <p><strong>Reason:</strong> {reason}</p>
        <p>You can request another time slot at any time.</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=booking.user.email,
        subject="Booking request rejected",
        html_message=html_message,
    )


def send_booking_cancelled_email(booking: "Booking") -> bool:
    reason = booking.cancellation_reason or "Not specified"
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {_display_name(booking.user)}!</h2>
        <p>Your booking has been cancelled.</p>
        {_booking_summary(booking)}
        <p><strong>Reason:</strong> {reason}</p>
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=booking.user.email,
        subject="Booking cancelled",
        html_message=html_message,
    )


def send_booking_no_show_email(booking: "Booking") -> bool:
    html_message = f"""
    <html>
    <body>
        <h2>Hello, {_display_name(booking.user)}!</h2>
        <p>You did not check in for your booking, so it was marked as a no-show and the spot was released.</p>
        {_booking_summary(booking)}
    </body>
    </html>
    """
    return send_email_notification(
        recipient_email=booking.user.email,
        subject="Missed parking booking",
        html_message=html_message,
    )


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def create_in_app_notification(
    user: "User",
    title: str,
    message: str,
    booking: "Booking | None" = None,
) -> bool:
    """
    Store an in-app notification.

    Returns:
        bool: True if the notification row was created
    """
    try:
        from .models import Notification

        Notification.objects.create(
            user=user,
            booking=booking,
            title=title,
            message=message,
        )

        logger.info(f"In-app notification created for {user.email}: {title}")
        return True

    except Exception as e:
        logger.error(f"Failed to create in-app notification for {user.email}: {e}", exc_info=True)
        return False


# ============================================================================
# BOOKING EVENTS
# ============================================================================

def notify_booking_approved(booking: "Booking") -> dict[str, bool]:
    return {
        "email": send_booking_approved_email(booking),
        "in_app": create_in_app_notification(
            booking.user,
            "Booking approved",
            f"Spot {booking.spot.spot_number} is reserved for you from "
            f"{_format_dt(booking.start_time)} to {_format_dt(booking.end_time)}. "
            f"Ticket: {booking.ticket_number}.",
            booking=booking,
        ),
    }


def notify_booking_rejected(booking: "Booking") -> dict[str, bool]:
    return {
        "email": send_booking_rejected_email(booking),
        "in_app": create_in_app_notification(
            booking.user,
            "Booking rejected",
            f"Your request for spot {booking.spot.spot_number} was rejected. "
            f"Reason: {booking.cancellation_reason or 'Not specified'}",
            booking=booking,
        ),
    }


def notify_booking_cancelled(booking: "Booking") -> dict[str, bool]:
    return {
        "email": send_booking_cancelled_email(booking),
        "in_app": create_in_app_notification(
            booking.user,
            "Booking cancelled",
            f"Your booking for spot {booking.spot.spot_number} on "
            f"{_format_dt(booking.start_time)} was cancelled.",
            booking=booking,
        ),
    }


def notify_booking_no_show(booking: "Booking") -> dict[str, bool]:
    return {
        "email": send_booking_no_show_email(booking),
        "in_app": create_in_app_notification(
            booking.user,
            "Booking marked as no-show",
            f"You did not check in to spot {booking.spot.spot_number} in time.",
            booking=booking,
        ),
    }
