"""
Data sources a CSV export can come from, and the table each one lands in.
"""
from enum import Enum
from typing import List, Optional


class DataSource(str, Enum):
    TIKTOK = "tiktok"
    SHOPEE = "shopee"
    AIPOST = "aipost"
    GOAFFPRO = "goaffpro"

    @property
    def label(self) -> str:
        return SOURCE_LABELS[self]

    @property
    def table_name(self) -> str:
        return f"temp_{self.value}_data"


SOURCE_LABELS = {
    DataSource.TIKTOK: "TikTok Shop",
    DataSource.SHOPEE: "Shopee",
    DataSource.AIPOST: "aiPost (Affiliate Enrollment)",
    DataSource.GOAFFPRO: "GoAffPro",
}


def source_tables() -> List[str]:
    return [source.table_name for source in DataSource]


def parse_source(value: Optional[str]) -> Optional[DataSource]:
    """Return the DataSource for a tag, or None for an empty/unknown tag"""
    if not value:
        return None
    try:
        return DataSource(value.strip().lower())
    except ValueError:
        return None
