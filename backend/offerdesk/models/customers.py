from __future__ import annotations

from ..extensions import db
from offerdesk.time_utils import to_utc_z


class Customer(db.Model):
    """
    Retailer who signed up through the self-service form.

    GST and food licence numbers are stored upper-cased, e-mail lower-cased.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("gst_number", name="uq_customers_gst_number"),
        db.UniqueConstraint("food_licence_number", name="uq_customers_food_licence_number"),
        db.UniqueConstraint("email", name="uq_customers_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(255), nullable=False)
    business_name = db.Column(db.String(255), nullable=False)
    contact_number = db.Column(db.String(32), nullable=False)
    street_address = db.Column(db.Text, nullable=False)
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    gst_number = db.Column(db.String(15), nullable=False)
    food_licence_number = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Customer id={self.id} business={self.business_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "business_name": self.business_name,
            "contact_number": self.contact_number,
            "street_address": self.street_address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "gst_number": self.gst_number,
            "food_licence_number": self.food_licence_number,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }
