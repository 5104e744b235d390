"""Item templates for each checklist type, grouped into sections."""

from __future__ import annotations

from stayops.models.checklist import ChecklistType

Template = list[tuple[str, list[str]]]

CLEANING_TEMPLATE: Template = [
    ("Ground Floor", ["Back Bedroom", "Front Bedroom", "Bathroom", "Games Room"]),
    ("2nd Floor", [
        "Powder Room", "Kitchen", "Fridge", "Freezer", "Dishwasher 1", "Dishwasher 2",
        "Coffee Maker", "Sink", "Living Room", "Back Patio", "Back Wet Bar", "Bar Fridge",
        "Front Bed/Bath", "Back Bed/Bath",
    ]),
    ("3rd Floor", ["Front Bed/Bath", "Back Bed/Bath", "Balcony"]),
    ("Additional", ["1 Beach towel - each guest", "Welcome drink displayed"]),
]

INSPECTION_TEMPLATE: Template = [
    ("HOME IS GUEST READY", ["HOME IS GUEST READY", "KEY CODE SENT"]),
    ("Check each item completed", [
        "Laundry Dropoff/Pickup", "House has needed linens", "Check for stains & damage",
    ]),
    ("Exterior Front", [
        "Grill", "Grill Propane", "Powerwash Upper Deck", "Check Deck Furniture", "Pool Check",
        "Pool Temp", "Lights", "Jets", "Pool Deck", "Pool Furniture", "Pool toys",
        "Front yard debris", "Rake driveway",
    ]),
    ("Amenities", [
        "Bikes (4)", "Bike Tires", "Bike Helmets (4)", "Kayaks (3)", "Kayak Paddles (3)",
        "Pack & Play", "High Chair", "Clothes Iron", "Hair Dryer",
    ]),
    ("Exterior Back", [
        "Ping-pong", "Balls & Paddles", "Putting Green", "Flags", "Lights", "Putters & Balls",
        "Beach Rake", "Beach Kayaks", "Boat Lines Secure", "Dock Powerwash", "Dock Lights",
    ]),
    ("1st Floor", ["Laundry machine check"]),
    ("Misc", [
        "TV remotes", "Shade remotes", "WIFI Reset", "All windows clean", "Key in lockbox",
        "Trash", "Windows / doors locked", "Supply closet check",
    ]),
]

SUPPLIES_TEMPLATE: Template = [
    ("Bathrooms", [
        "Indiv Soaps", "Hand Soap", "Indiv Conditioner", "Indiv Body Wash", "Hand towels",
        "Bath Towels", "Bath Mats", "Facecloth",
    ]),
    ("Laundry", ["Laundry Pods", "Laundry Bleach"]),
    ("Kitchen", [
        "Kitchen Pods", "Dish Soap", "Sponge", "Dish Towel", "Glass Cleaner", "Trash Bags",
        "Coffee", "Welcome drink supplies", "Juice", "Vodka",
    ]),
    ("Bedrooms", [
        "3 sets per bed", "Fitted Sheets", "Top Sheets", "Blankets", "Pillow Cases",
        "Throw Pillows",
    ]),
    ("Misc", ["Light bulbs", "Grill cleaner"]),
]

MAINTENANCE_TEMPLATE: Template = [
    ("Maintenance Items", [
        "Smoke detect Batteries", "Patio Furniture", "Terminex visit", "Order Hand Soap",
        "Exterior cameras check", "Change HVAC Filters", "Exterior window cleaning",
        "Steam clean couch & throw pillows", "Trash to curb", "Check welcome book",
    ]),
]

TEMPLATES: dict[ChecklistType, Template] = {
    ChecklistType.CLEANING: CLEANING_TEMPLATE,
    ChecklistType.INSPECTION: INSPECTION_TEMPLATE,
    ChecklistType.SUPPLIES: SUPPLIES_TEMPLATE,
    ChecklistType.MAINTENANCE: MAINTENANCE_TEMPLATE,
}


def template_for(checklist_type: ChecklistType | str | None) -> Template:
    """Sections for a checklist type; untyped checklists use the inspection list."""
    if checklist_type is None:
        return INSPECTION_TEMPLATE
    return TEMPLATES[ChecklistType(checklist_type)]


def template_items(checklist_type: ChecklistType | str | None) -> list[str]:
    """Distinct item names in template order."""
    seen: dict[str, None] = {}
    for _, items in template_for(checklist_type):
        for item in items:
            seen.setdefault(item, None)
    return list(seen)
