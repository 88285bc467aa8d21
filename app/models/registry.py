"""
SQLAlchemy models for the registry tables: people, cars and stores.
"""

from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.db.base_model import BaseModel, TimestampMixin


class Car(Base, TimestampMixin):
    """
    A car is keyed by its user-supplied vin.
    One car may be owned by many people.
    """
    __tablename__ = "cars"

    vin = Column(String, primary_key=True)
    make = Column(String, nullable=True, index=True)
    model = Column(String, nullable=True)
    year = Column(String, nullable=True, index=True)

    # Owners keep their row when the car goes away; the database nulls people.vin
    owners = relationship("Person", back_populates="car", passive_deletes=True)

    def __repr__(self):
        return f"<Car {self.vin} {self.make} {self.model}>"


class Person(Base, BaseModel):
    __tablename__ = "people"

    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True, index=True)
    vin = Column(String, ForeignKey("cars.vin", ondelete="SET NULL"), nullable=True, index=True)

    car = relationship("Car", back_populates="owners")

    def __repr__(self):
        return f"<Person {self.id} {self.first_name} {self.last_name}>"


class Store(Base, BaseModel):
    __tablename__ = "stores"

    retailer = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)

    def __repr__(self):
        return f"<Store {self.id} {self.retailer}>"
