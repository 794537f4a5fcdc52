from __future__ import annotations

import argparse
from uuid import uuid4

from sqlalchemy import select

from services.api.app.auth import ADMIN_ROLE, hash_password, issue_token
from services.api.app.config import get_settings
from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import MenuItem, User

# (name, description, price in minor units, category, preparation minutes)
_MENU = (
    ("Margherita Pizza", "Classic pizza with tomato sauce and mozzarella", 29900, "pizza", 20),
    ("Paneer Tikka Pizza", "Spiced paneer, onions and capsicum", 34900, "pizza", 25),
    ("Veg Burger", "Crispy veg patty with lettuce and mayo", 14900, "burgers", 15),
    ("Chicken Burger", "Grilled chicken with cheese", 19900, "burgers", 15),
    ("Masala Dosa", "Rice crepe with potato filling and chutneys", 12900, "south-indian", 15),
    ("Gulab Jamun", "Two pieces in warm sugar syrup", 7900, "desserts", 5),
    ("Cold Coffee", "Chilled coffee with ice cream", 9900, "beverages", 5),
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed Foodie menu items and the super admin")
    parser.add_argument("--admin-email", default=None, help="Defaults to FOODIE_SUPER_ADMIN_EMAIL")
    parser.add_argument("--admin-password", default="admin123")
    parser.add_argument("--admin-name", default="Foodie Admin")
    parser.add_argument("--admin-phone", default="0000000000")
    parser.add_argument("--print-token", action="store_true")
    args = parser.parse_args()

    settings = get_settings()
    admin_email = (args.admin_email or settings.super_admin_email).strip().lower()

    init_db()

    db = db_session()
    try:
        admin = db.execute(select(User).where(User.email == admin_email)).scalars().first()
        if admin is None:
            admin = User(
                id=uuid4().hex,
                name=args.admin_name,
                email=admin_email,
                password_hash=hash_password(args.admin_password),
                phone=args.admin_phone,
                address="",
                role=ADMIN_ROLE,
            )
            db.add(admin)

        existing_menu = db.query(MenuItem).limit(1).count()
        if existing_menu == 0:
            for name, description, price, category, prep in _MENU:
                db.add(
                    MenuItem(
                        id=uuid4().hex,
                        name=name,
                        description=description,
                        price=price,
                        category=category,
                        available=True,
                        preparation_time=prep,
                    )
                )

        db.commit()
        print(f"Seeded admin={admin_email} menu_items={db.query(MenuItem).count()}")
        if args.print_token:
            print(issue_token(admin.id, settings))
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
