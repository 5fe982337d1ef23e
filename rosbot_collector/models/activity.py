from typing import List

from pydantic import BaseModel, Field

from rosbot_collector.services.collector.base import Destination, Quality, Rarity


class ParserConfig(BaseModel):
    """Filters applied to a bot-activity page.

    destinations: accepted destinations, empty means all of them
    rarity_level: rarity floor (ANCIENT keeps ancients and primals, PRIMAL keeps primals only)
    quality: NORMAL, SET or "*" for both
    page: 1-based page of the activity feed
    """

    destinations: List[Destination] = Field(default_factory=list, description="Accepted destinations (empty = all)")
    rarity_level: Rarity = Field(Rarity.NON_ANCIENT, description="Rarity floor")
    quality: Quality = Field(Quality.ALL, description="Quality filter, '*' for all")
    page: int = Field(1, ge=1, description="Activity feed page number")

    model_config = {"frozen": True}
