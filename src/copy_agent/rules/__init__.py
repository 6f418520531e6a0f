"""Static writing rules: channel catalog and email campaign structures."""

from .campaigns import CampaignType, detect_campaign_type, get_campaign
from .catalog import ChannelRules, forbidden_terms, get_rules, parse_channel

__all__ = [
    "CampaignType",
    "ChannelRules",
    "detect_campaign_type",
    "forbidden_terms",
    "get_campaign",
    "get_rules",
    "parse_channel",
]
