from decimal import Decimal
import logging

from sqlalchemy import select

from venue_booking.config import configure_logging
from venue_booking.domain.pricing import MealType, PricingUnit, ServingStyle, VenueType
from venue_booking.infrastructure.db.models import Meal, Venue
from venue_booking.infrastructure.db.session import Base, engine, get_db_session, settings

logger = logging.getLogger("seed_demo_data")


def _hours(weekday: tuple[str, str], weekend: tuple[str, str]) -> dict:
    days = {}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday"):
        days[day] = {"open": weekday[0], "close": weekday[1]}
    for day in ("saturday", "sunday"):
        days[day] = {"open": weekend[0], "close": weekend[1]}
    return days


VENUES = [
    {
        "name": "Grand Ballroom",
        "description": "Elegant ballroom for weddings and corporate events with crystal chandeliers and marble floors.",
        "address": "123 Main Street, Downtown City",
        "city": "Dhaka",
        "state": "Dhaka Division",
        "zip_code": "1000",
        "capacity": 500,
        "venue_type": VenueType.INDOOR,
        "price_per_hour": Decimal("250.00"),
        "minimum_hours": 4,
        "security_deposit": Decimal("5000.00"),
        "facilities": ["parking", "ac", "wifi", "sound_system", "lighting", "stage", "kitchen"],
        "amenities": ["bridal_room", "vip_lounge", "dance_floor"],
        "contact_person": "Ahmed Hassan",
        "contact_phone": "+8801712345678",
        "contact_email": "contact@grandballroom.com",
        "operating_hours": _hours(("09:00", "23:00"), ("08:00", "24:00")),
    },
    {
        "name": "Garden Pavilion",
        "description": "Outdoor pavilion surrounded by gardens, suited to intimate ceremonies and receptions.",
        "address": "456 Park Avenue, Green Valley",
        "city": "Chittagong",
        "state": "Chittagong Division",
        "zip_code": "4000",
        "capacity": 200,
        "venue_type": VenueType.OUTDOOR,
        "price_per_hour": Decimal("150.00"),
        "minimum_hours": 6,
        "security_deposit": Decimal("3000.00"),
        "facilities": ["parking", "wifi", "sound_system", "lighting", "garden"],
        "amenities": ["outdoor_space", "gazebo", "fountain"],
        "contact_person": "Fatima Rahman",
        "contact_phone": "+8801812345678",
        "contact_email": "info@gardenpavilion.com",
        "operating_hours": _hours(("10:00", "22:00"), ("09:00", "23:00")),
    },
    {
        "name": "Conference Center",
        "description": "Modern conference facility with AV equipment and flexible seating.",
        "address": "789 Business District, Metro City",
        "city": "Sylhet",
        "state": "Sylhet Division",
        "zip_code": "3100",
        "capacity": 300,
        "venue_type": VenueType.INDOOR,
        "price_per_hour": Decimal("180.00"),
        "minimum_hours": 4,
        "security_deposit": Decimal("4000.00"),
        "facilities": ["parking", "ac", "wifi", "projector", "kitchen"],
        "amenities": ["conference_rooms", "break_out_areas", "business_center"],
        "contact_person": "Mohammad Ali",
        "contact_phone": "+8801912345678",
        "contact_email": "bookings@conferencecentersylhet.com",
        "operating_hours": _hours(("08:00", "22:00"), ("09:00", "20:00")),
    },
    {
        "name": "Rooftop Terrace",
        "description": "Rooftop venue with panoramic city views for cocktail parties and celebrations.",
        "address": "321 Skyline Boulevard, Uptown",
        "city": "Dhaka",
        "state": "Dhaka Division",
        "zip_code": "1205",
        "capacity": 150,
        "venue_type": VenueType.OUTDOOR,
        "price_per_hour": Decimal("200.00"),
        "minimum_hours": 4,
        "security_deposit": Decimal("3500.00"),
        "facilities": ["wifi", "sound_system", "lighting", "elevator"],
        "amenities": ["bar_area", "city_view", "sunset_view"],
        "alcohol_allowed": True,
        "contact_person": "Sarah Khan",
        "contact_phone": "+8801612345678",
        "contact_email": "events@rooftopterrace.com",
        "operating_hours": _hours(("16:00", "24:00"), ("14:00", "24:00")),
    },
    {
        "name": "Heritage Hall",
        "description": "Historic venue with original architecture and classic interiors.",
        "address": "654 Historic Lane, Old Town",
        "city": "Rajshahi",
        "state": "Rajshahi Division",
        "zip_code": "6000",
        "capacity": 400,
        "venue_type": VenueType.INDOOR,
        "pricing_unit": PricingUnit.DAY,
        "price_per_hour": Decimal("220.00"),
        "price_per_day": Decimal("2400.00"),
        "minimum_hours": 5,
        "minimum_days": 1,
        "security_deposit": Decimal("4500.00"),
        "facilities": ["parking", "ac", "wifi", "stage", "kitchen"],
        "amenities": ["heritage_architecture", "grand_staircase", "courtyard"],
        "contact_person": "Rashid Ahmed",
        "contact_phone": "+8801512345678",
        "contact_email": "heritage@heritagehall.com",
        "operating_hours": _hours(("09:00", "22:00"), ("08:00", "23:00")),
    },
]

MEALS = [
    {
        "name": "Vegetarian Deluxe",
        "description": "Seasonal vegetables, quinoa salad, pasta primavera and dessert.",
        "type": MealType.VEG,
        "cuisine": "continental",
        "serving_style": ServingStyle.PLATED,
        "price_per_person": Decimal("325.00"),
        "minimum_guests": 50,
        "menu_items": ["Vegetable Spring Rolls", "Pasta Primavera", "Chocolate Mousse"],
        "special_dietary": ["halal", "gluten_free", "dairy_free"],
        "is_popular": True,
    },
    {
        "name": "Chicken & Beef Combo",
        "description": "Grilled chicken, beef tenderloin, roasted vegetables and chocolate cake.",
        "type": MealType.NONVEG,
        "cuisine": "continental",
        "serving_style": ServingStyle.PLATED,
        "price_per_person": Decimal("335.00"),
        "minimum_guests": 40,
        "menu_items": ["Chicken Wings", "Beef Tenderloin", "Chocolate Cake"],
        "special_dietary": ["halal"],
        "is_popular": True,
    },
    {
        "name": "International Buffet",
        "description": "Asian, Mediterranean and American dishes served buffet style.",
        "type": MealType.BUFFET,
        "cuisine": "international",
        "serving_style": ServingStyle.BUFFET,
        "price_per_person": Decimal("445.00"),
        "minimum_guests": 100,
        "menu_items": ["Fried Rice", "Grilled Lamb", "BBQ Ribs", "Ice Cream Station"],
        "special_dietary": ["halal", "gluten_free", "nut_free"],
        "is_popular": True,
    },
    {
        "name": "Seafood Special",
        "description": "Grilled salmon, shrimp cocktail, lobster bisque and seasonal sides.",
        "type": MealType.NONVEG,
        "cuisine": "seafood",
        "serving_style": ServingStyle.PLATED,
        "price_per_person": Decimal("550.00"),
        "minimum_guests": 30,
        "menu_items": ["Shrimp Cocktail", "Grilled Salmon", "Key Lime Pie"],
        "special_dietary": ["halal"],
    },
    {
        "name": "Vegan Gourmet",
        "description": "Plant-based proteins, organic vegetables and dairy-free desserts.",
        "type": MealType.VEG,
        "cuisine": "vegan",
        "serving_style": ServingStyle.PLATED,
        "price_per_person": Decimal("430.00"),
        "minimum_guests": 40,
        "menu_items": ["Quinoa Salad", "Jackfruit Curry", "Coconut Panna Cotta"],
        "special_dietary": ["vegan", "gluten_free", "dairy_free", "nut_free"],
    },
]


def seed_venues(db) -> int:
    created = 0
    for item in VENUES:
        existing = db.execute(select(Venue).where(Venue.name == item["name"])).scalar_one_or_none()
        if existing:
            logger.info("Venue already exists: %s", existing.name)
            continue
        db.add(Venue(**item))
        created += 1
        logger.info("Venue created: %s", item["name"])
    return created


def seed_meals(db) -> int:
    created = 0
    for item in MEALS:
        existing = db.execute(select(Meal).where(Meal.name == item["name"])).scalar_one_or_none()
        if existing:
            logger.info("Meal already exists: %s", existing.name)
            continue
        db.add(Meal(**item))
        created += 1
        logger.info("Meal created: %s", item["name"])
    return created


def main() -> None:
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    with get_db_session() as db:
        venues = seed_venues(db)
        meals = seed_meals(db)
    logger.info("Seed complete: %s venues and %s meals added.", venues, meals)


if __name__ == "__main__":
    main()
