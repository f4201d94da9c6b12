from sqlalchemy import Column, Float, ForeignKey, Integer, Text, text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Providers(Base):
    __tablename__ = 'providers'

    username = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    email = Column(Text)
    timezone = Column(Text, nullable=False, server_default=text("'UTC'"))
    date_format = Column(Text, nullable=False, server_default=text("'PPP'"))
    # {"monday": {"start": "09:00", "end": "17:00"}, "sunday": null, ...}
    work_schedule = Column(Text, nullable=False, server_default=text("'{}'"))
    slot_duration_minutes = Column(Integer, nullable=False, server_default=text('30'))
    break_minutes = Column(Integer, nullable=False, server_default=text('0'))
    booking_delay_hours = Column(Float, nullable=False, server_default=text('0'))
    multiple_bookings_per_slot = Column(Integer, nullable=False, server_default=text('0'))
    bookings_per_slot = Column(Integer, nullable=False, server_default=text('1'))
    # JSON list of "YYYY-MM-DD"
    blocked_dates = Column(Text, nullable=False, server_default=text("'[]'"))
    # JSON list of ISO instants
    blocked_slots = Column(Text, nullable=False, server_default=text("'[]'"))
    is_suspended = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    bookings = relationship('Bookings', back_populates='provider')


class Bookings(Base):
    __tablename__ = 'bookings'

    provider_id = Column(ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    customer_name = Column(Text, nullable=False)
    # ISO instant in UTC
    date_time = Column(Text, nullable=False, index=True)
    status = Column(Text, nullable=False, server_default=text("'Upcoming'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    customer_email = Column(Text)
    customer_phone = Column(Text)
    service_type = Column(Text)
    notes = Column(Text)
    cancel_reason = Column(Text)

    provider = relationship('Providers', back_populates='bookings')
