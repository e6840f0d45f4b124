from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint, func, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Business(Base):
    __tablename__ = 'business'

    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    email = Column(Text)
    timezone = Column(Text, nullable=False, server_default=text("'America/New_York'"))

    # Booking settings
    min_notice_hours = Column(Integer, nullable=False, server_default=text('0'))
    max_advance_days = Column(Integer, nullable=False, server_default=text('30'))
    buffer_minutes = Column(Integer, nullable=False, server_default=text('0'))
    slot_duration = Column(Integer, nullable=False, server_default=text('30'))

    # NULL = not configured, defaults apply (flexible / 24h)
    cancellation_policy = Column(Text)
    cancellation_hours = Column(Integer)

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    services = relationship('Services', back_populates='business')
    customers = relationship('Customers', back_populates='business')
    availability = relationship('Availability', back_populates='business')
    blocked_dates = relationship('BlockedDates', back_populates='business')
    bookings = relationship('Bookings', back_populates='business')


class Services(Base):
    __tablename__ = 'services'

    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    price = Column(Float, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    business = relationship('Business', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')


class Customers(Base):
    __tablename__ = 'customers'
    __table_args__ = (
        UniqueConstraint('business_id', 'phone'),
    )

    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    email = Column(Text)
    no_show_count = Column(Integer, nullable=False, server_default=text('0'))

    business = relationship('Business', back_populates='customers')
    bookings = relationship('Bookings', back_populates='customer')


class Availability(Base):
    __tablename__ = 'availability'

    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Text, nullable=False)  # "HH:MM", business local time
    end_time = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    is_available = Column(Integer, nullable=False, server_default=text('1'))

    business = relationship('Business', back_populates='availability')


class BlockedDates(Base):
    __tablename__ = 'blocked_dates'

    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    date = Column(Text, nullable=False)  # "YYYY-MM-DD"
    id = Column(Integer, primary_key=True)
    start_time = Column(Text)  # NULL = whole day
    end_time = Column(Text)
    reason = Column(Text)

    business = relationship('Business', back_populates='blocked_dates')


class Bookings(Base):
    __tablename__ = 'bookings'

    business_id = Column(ForeignKey('business.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    customer_id = Column(ForeignKey('customers.id', ondelete='CASCADE'), nullable=False)
    # Naive UTC instants
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False, index=True)
    status = Column(Text, nullable=False, server_default=text("'pending'"), index=True)
    id = Column(Integer, primary_key=True)
    payment_amount = Column(Float)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
    cancelled_at = Column(DateTime)
    cancelled_by = Column(Text)
    cancellation_reason = Column(Text)

    business = relationship('Business', back_populates='bookings')
    service = relationship('Services', back_populates='bookings')
    customer = relationship('Customers', back_populates='bookings')
