"""
BookingService - persistence of finalized bookings.

This service handles:
- Booking creation from validated BookingCreate requests
- Lookups, filtered listings and upcoming bookings
- Updates and status transitions (confirm, cancel, complete)
- Aggregate statistics
"""
import math
from datetime import date
from typing import List, Optional, Protocol, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from loguru import logger

from error_handling.exceptions import (
    BookingNotFoundError,
    BookingValidationError,
    DatabaseError,
)
from error_handling.logging_config import log_booking_event
from models.database import Booking
from models.schemas import (
    BookingCreate,
    BookingPage,
    BookingResponse,
    BookingStats,
    BookingStatus,
    BookingUpdate,
    CountEntry,
    Cuisine,
)

ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class BookingStore(Protocol):
    """What the dialogue engine needs from a persistence collaborator."""

    def create_booking(self, booking_data: BookingCreate) -> BookingResponse:
        ...


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


class BookingService:
    """
    Service class that encapsulates booking persistence.

    Every public method either returns BookingResponse models (detached from
    the SQLAlchemy session) or raises one of the error_handling exceptions.
    """

    def __init__(self, session: Session):
        """
        Initialize the booking service with a database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def _get(self, booking_id: str) -> Booking:
        booking = self.session.query(Booking).filter(Booking.booking_id == booking_id).first()
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def _commit(self, operation: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
            raise DatabaseError(
                f"Database constraint violation: {error_msg}",
                operation=operation,
                original_error=e
            )
        except SQLAlchemyError as e:
            self.session.rollback()
            raise DatabaseError(
                f"Database operation failed: {str(e)}",
                operation=operation,
                original_error=e
            )

    def create_booking(self, booking_data: BookingCreate) -> BookingResponse:
        """
        Store a new booking.

        Args:
            booking_data: Validated booking request

        Returns:
            The stored booking with its generated booking id

        Raises:
            DatabaseError: If the database operation fails
        """
        weather_info = (
            booking_data.weather_info.model_dump(mode="json")
            if booking_data.weather_info is not None
            else None
        )
        booking = Booking(
            customer_name=booking_data.customer_name,
            number_of_guests=booking_data.number_of_guests,
            booking_date=booking_data.booking_date,
            booking_time=booking_data.booking_time,
            cuisine_preference=booking_data.cuisine_preference.value,
            special_requests=booking_data.special_requests,
            weather_info=weather_info,
            seating_preference=booking_data.seating_preference.value,
            status=booking_data.status.value,
            contact_phone=booking_data.contact_phone,
            contact_email=booking_data.contact_email,
            table_number=booking_data.table_number,
            notes=booking_data.notes,
        )

        self.session.add(booking)
        self._commit("create_booking")

        logger.info(f"Booking created: {booking}")
        return BookingResponse.model_validate(booking)

    def get_booking(self, booking_id: str) -> BookingResponse:
        """
        Get a booking by its booking id.

        Raises:
            BookingNotFoundError: If no booking has this id
        """
        return BookingResponse.model_validate(self._get(booking_id))

    def list_bookings(
        self,
        status: Optional[Union[str, BookingStatus]] = None,
        booking_date: Optional[date] = None,
        cuisine: Optional[Union[str, Cuisine]] = None,
        limit: int = 50,
        page: int = 1,
    ) -> BookingPage:
        """
        List bookings ordered by date and time, with optional filters.

        Args:
            status: Only bookings with this status
            booking_date: Only bookings on this date
            cuisine: Only bookings with this cuisine preference
            limit: Page size
            page: 1-based page number

        Returns:
            BookingPage with the items and paging totals
        """
        if limit < 1 or page < 1:
            raise BookingValidationError(
                "limit and page must be positive",
                field="limit" if limit < 1 else "page",
                value=limit if limit < 1 else page,
            )

        query = self.session.query(Booking)
        if status:
            query = query.filter(Booking.status == _enum_value(status))
        if cuisine:
            query = query.filter(Booking.cuisine_preference == _enum_value(cuisine))
        if booking_date:
            query = query.filter(Booking.booking_date == booking_date)

        total = query.count()
        bookings = (
            query.order_by(Booking.booking_date, Booking.booking_time)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return BookingPage(
            items=[BookingResponse.model_validate(b) for b in bookings],
            count=len(bookings),
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def find_upcoming(self, today: Optional[date] = None) -> List[BookingResponse]:
        """Pending or confirmed bookings from today onwards."""
        today = today or date.today()
        bookings = (
            self.session.query(Booking)
            .filter(Booking.booking_date >= today, Booking.status.in_(ACTIVE_STATUSES))
            .order_by(Booking.booking_date, Booking.booking_time)
            .all()
        )
        return [BookingResponse.model_validate(b) for b in bookings]

    def find_by_date_range(self, start_date: date, end_date: date) -> List[BookingResponse]:
        """All bookings with start_date <= booking_date <= end_date."""
        bookings = (
            self.session.query(Booking)
            .filter(Booking.booking_date >= start_date, Booking.booking_date <= end_date)
            .order_by(Booking.booking_date, Booking.booking_time)
            .all()
        )
        return [BookingResponse.model_validate(b) for b in bookings]

    def update_booking(self, booking_id: str, changes: BookingUpdate) -> BookingResponse:
        """
        Apply a partial update; only fields set on ``changes`` are written.

        Raises:
            BookingNotFoundError: If no booking has this id
            DatabaseError: If the database operation fails
        """
        booking = self._get(booking_id)
        updates = changes.model_dump(exclude_unset=True)

        for field_name, value in updates.items():
            setattr(booking, field_name, _enum_value(value))

        self._commit("update_booking")
        log_booking_event("UPDATED", booking_id=booking_id, details={"fields": sorted(updates)})
        return BookingResponse.model_validate(booking)

    def update_status(self, booking_id: str, status: Union[str, BookingStatus]) -> BookingResponse:
        """
        Move a booking to a new status.

        Raises:
            BookingValidationError: If the status is unknown
            BookingNotFoundError: If no booking has this id
        """
        try:
            new_status = BookingStatus(status)
        except ValueError:
            raise BookingValidationError(
                f"Invalid status: {status!r}. Use: pending, confirmed, cancelled, or completed",
                field="status",
                value=status,
            )

        booking = self._get(booking_id)
        old_status = booking.status
        booking.status = new_status.value
        self._commit("update_status")

        log_booking_event(
            "STATUS_CHANGED",
            booking_id=booking_id,
            details={"old_status": old_status, "new_status": new_status.value},
        )
        return BookingResponse.model_validate(booking)

    def confirm(self, booking_id: str) -> BookingResponse:
        return self.update_status(booking_id, BookingStatus.CONFIRMED)

    def cancel(self, booking_id: str) -> BookingResponse:
        return self.update_status(booking_id, BookingStatus.CANCELLED)

    def complete(self, booking_id: str) -> BookingResponse:
        return self.update_status(booking_id, BookingStatus.COMPLETED)

    def cancel_booking(self, booking_id: str) -> BookingResponse:
        """
        Soft delete: the record is kept with status "cancelled".

        Raises:
            BookingNotFoundError: If no booking has this id
        """
        cancelled = self.cancel(booking_id)
        log_booking_event("DELETED", booking_id=booking_id, details={"soft_delete": True})
        return cancelled

    def get_stats(self) -> BookingStats:
        """
        Totals per status, the five most requested cuisines and seating counts.
        """
        status_counts = dict(
            self.session.query(Booking.status, func.count(Booking.id))
            .group_by(Booking.status)
            .all()
        )

        count = func.count(Booking.id).label("count")
        cuisines = (
            self.session.query(Booking.cuisine_preference, count)
            .group_by(Booking.cuisine_preference)
            .order_by(count.desc(), Booking.cuisine_preference)
            .limit(5)
            .all()
        )
        seating = (
            self.session.query(Booking.seating_preference, func.count(Booking.id))
            .group_by(Booking.seating_preference)
            .order_by(Booking.seating_preference)
            .all()
        )

        return BookingStats(
            total=sum(status_counts.values()),
            confirmed=status_counts.get(BookingStatus.CONFIRMED.value, 0),
            pending=status_counts.get(BookingStatus.PENDING.value, 0),
            cancelled=status_counts.get(BookingStatus.CANCELLED.value, 0),
            completed=status_counts.get(BookingStatus.COMPLETED.value, 0),
            popular_cuisines=[CountEntry(key=key, count=n) for key, n in cuisines],
            seating_preferences=[CountEntry(key=key, count=n) for key, n in seating],
        )
