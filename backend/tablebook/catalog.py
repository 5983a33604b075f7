from .models import (
    BusinessHours,
    DayCategory,
    OpeningHours,
    Position,
    RestaurantSection,
    SpecialOccasion,
    Table,
    TableArea,
    TableShape,
)


def _table(table_id: int, name: str, shape: TableShape, seats: int, area: TableArea, x: int, y: int) -> Table:
    return Table(id=table_id, name=name, shape=shape, seats=seats, area=area, position=Position(x=x, y=y))


TABLES: tuple[Table, ...] = (
    # Main dining area
    _table(1, "Table 1", TableShape.ROUND, 2, TableArea.WINDOW, 100, 80),
    _table(2, "Table 2", TableShape.ROUND, 2, TableArea.WINDOW, 180, 80),
    _table(3, "Table 3", TableShape.ROUND, 4, TableArea.WINDOW, 260, 80),
    _table(4, "Table 4", TableShape.ROUND, 4, TableArea.MAIN, 100, 160),
    _table(5, "Table 5", TableShape.ROUND, 4, TableArea.MAIN, 180, 160),
    _table(6, "Table 6", TableShape.ROUND, 4, TableArea.MAIN, 260, 160),
    # Booths along the wall
    _table(7, "Booth 1", TableShape.BOOTH, 4, TableArea.MAIN, 40, 220),
    _table(8, "Booth 2", TableShape.BOOTH, 4, TableArea.MAIN, 40, 300),
    _table(9, "Booth 3", TableShape.BOOTH, 4, TableArea.MAIN, 40, 380),
    _table(10, "Table 10", TableShape.RECTANGLE, 6, TableArea.MAIN, 180, 250),
    _table(11, "Table 11", TableShape.RECTANGLE, 6, TableArea.MAIN, 180, 350),
    _table(12, "Bar 1", TableShape.SQUARE, 2, TableArea.BAR, 340, 220),
    _table(13, "Bar 2", TableShape.SQUARE, 2, TableArea.BAR, 340, 260),
    _table(14, "Bar 3", TableShape.SQUARE, 2, TableArea.BAR, 340, 300),
    _table(15, "Bar 4", TableShape.SQUARE, 2, TableArea.BAR, 340, 340),
    _table(16, "Patio 1", TableShape.ROUND, 4, TableArea.PATIO, 100, 450),
    _table(17, "Patio 2", TableShape.ROUND, 4, TableArea.PATIO, 180, 450),
    _table(18, "Patio 3", TableShape.ROUND, 4, TableArea.PATIO, 260, 450),
    _table(19, "Private", TableShape.RECTANGLE, 10, TableArea.PRIVATE, 250, 550),
)

RESTAURANT_SECTIONS: tuple[RestaurantSection, ...] = (
    RestaurantSection(
        id=TableArea.WINDOW,
        name="Window",
        description="Enjoy your meal with a view of Gourmet Avenue",
    ),
    RestaurantSection(
        id=TableArea.MAIN,
        name="Main Dining",
        description="The heart of our restaurant with a warm, inviting atmosphere",
    ),
    RestaurantSection(
        id=TableArea.BAR,
        name="Bar Area",
        description="Casual seating near our full-service bar",
    ),
    RestaurantSection(
        id=TableArea.PATIO,
        name="Patio",
        description="Outdoor seating with heaters for year-round comfort",
    ),
    RestaurantSection(
        id=TableArea.PRIVATE,
        name="Private Room",
        description="Exclusive space for larger groups and special events",
    ),
)

BUSINESS_HOURS = BusinessHours(
    categories={
        DayCategory.MONDAY_TO_THURSDAY: OpeningHours(open="11:00 AM", close="10:00 PM", interval_minutes=30),
        DayCategory.FRIDAY_TO_SATURDAY: OpeningHours(open="11:00 AM", close="11:00 PM", interval_minutes=30),
        DayCategory.SUNDAY: OpeningHours(open="11:00 AM", close="9:00 PM", interval_minutes=30),
    }
)

SPECIAL_OCCASIONS: tuple[SpecialOccasion, ...] = tuple(SpecialOccasion)


def section_for(area: TableArea) -> RestaurantSection | None:
    return next((section for section in RESTAURANT_SECTIONS if section.id == area), None)
