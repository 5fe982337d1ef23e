"""Ros-Bot activity collector.

Structure:
- base.py: record types (ServerUpdate, LegendaryItem) and enums
- errors.py: CollectorError hierarchy
- session.py: login handshake, session value and activity fetch with one refresh
- query.py: ParserConfig -> activity page query string
- extractor.py: per-item parsing rules
- parser.py: concurrent block/item parsing into ordered updates
- filters.py: rarity/quality/destination filtering
- client.py: RosBotClient facade
- runner.py: tiny CLI entrypoint for manual runs

Network access uses httpx; HTML is queried with selectolax.
"""

__all__ = [
    "base",
    "client",
    "errors",
]
