"""
Sample property records for local runs and demos.
"""

from typing import Final

from core.models import Asset


SAMPLE_PROPERTIES: Final[tuple[dict, ...]] = (
    {
        "id": "sample-001",
        "property_name": "パークマンション渋谷",
        "property_type": "マンション",
        "price": 85000000,
        "address": "東京都渋谷区神南1-15-3",
        "station_name": "渋谷",
        "walk_time": 8,
        "building_age": 12,
        "building_area": 1250.0,
    },
    {
        "id": "sample-002",
        "property_name": "グランドメゾン新宿",
        "property_type": "マンション",
        "price": 120000000,
        "address": "東京都新宿区西新宿3-7-1",
        "station_name": "新宿",
        "walk_time": 5,
        "building_age": 8,
        "building_area": 2100.0,
    },
    {
        "id": "sample-003",
        "property_name": "サンシャイン池袋アパート",
        "property_type": "アパート",
        "price": 45000000,
        "address": "東京都豊島区東池袋1-50-35",
        "station_name": "池袋",
        "walk_time": 12,
        "building_age": 25,
        "building_area": 480.0,
    },
    {
        "id": "sample-004",
        "property_name": "大阪ビジネスホテル",
        "property_type": "ホテル",
        "price": 180000000,
        "address": "大阪府大阪市北区梅田2-4-12",
        "station_name": "大阪",
        "walk_time": 6,
        "building_age": 15,
        "building_area": 3200.0,
    },
    {
        "id": "sample-005",
        "property_name": "名古屋オフィスビル",
        "property_type": "オフィス",
        "price": 250000000,
        "address": "愛知県名古屋市中区錦3-6-29",
        "station_name": "栄",
        "walk_time": 3,
        "building_age": 10,
        "building_area": 2800.0,
    },
)


def create_sample_assets() -> list[Asset]:
    """Build fresh Asset objects from the sample records."""
    return [Asset.from_dict(record) for record in SAMPLE_PROPERTIES]
