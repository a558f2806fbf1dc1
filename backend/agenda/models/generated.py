from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Stores(Base):
    __tablename__ = 'stores'

    name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    slug = Column(Text, unique=True)
    timezone = Column(Text, nullable=False, server_default=text("'America/Sao_Paulo'"))
    slot_duration_min = Column(Integer)
    buffer_before_min = Column(Integer, nullable=False, server_default=text('0'))
    buffer_after_min = Column(Integer, nullable=False, server_default=text('0'))
    max_parallel = Column(Integer, nullable=False, server_default=text('1'))
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    hours = relationship('StoreHours', back_populates='store')
    services = relationship('Services', back_populates='store')
    bookings = relationship('Bookings', back_populates='store')


class StoreHours(Base):
    __tablename__ = 'store_hours'
    __table_args__ = (
        UniqueConstraint('store_id', 'day_of_week'),
    )

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    is_closed = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    open_time = Column(Text)
    close_time = Column(Text)

    store = relationship('Stores', back_populates='hours')


class Services(Base):
    __tablename__ = 'services'

    name = Column(Text, nullable=False)
    duration_min = Column(Integer, nullable=False)
    id = Column(Integer, primary_key=True)
    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'))
    description = Column(Text)
    price_cents = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    store = relationship('Stores', back_populates='services')


class TeamMembers(Base):
    __tablename__ = 'team_members'

    full_name = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    max_parallel = Column(Integer, nullable=False, server_default=text('1'))
    profile_pic = Column(Text)
    is_active = Column(Integer, nullable=False, server_default=text('1'))

    bookings = relationship('Bookings', back_populates='team_member')


class Bookings(Base):
    __tablename__ = 'bookings'

    store_id = Column(ForeignKey('stores.id', ondelete='CASCADE'), nullable=False)
    team_member_id = Column(ForeignKey('team_members.id', ondelete='RESTRICT'), nullable=False)
    start_ts = Column(Text, nullable=False)
    end_ts = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    service_id = Column(ForeignKey('services.id', ondelete='SET NULL'))
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    customer_name = Column(Text)
    customer_phone = Column(Text)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    store = relationship('Stores', back_populates='bookings')
    team_member = relationship('TeamMembers', back_populates='bookings')
