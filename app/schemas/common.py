from enum import Enum


class LeadSource(str, Enum):
    WALK_IN = "walk_in"
    REFERRAL = "referral"
    FACEBOOK = "facebook"
    WHATSAPP = "whatsapp"
    WEBSITE = "website"
    PROPERTY_PORTAL = "property_portal"
    OTHER = "other"


class InterestType(str, Enum):
    rent = "rent"
    buy = "buy"


class ListingType(str, Enum):
    rent = "rent"
    sale = "sale"


class PropertyType(str, Enum):
    house = "house"
    apartment = "apartment"
    land = "land"
    commercial = "commercial"
    other = "other"


class PropertyStatus(str, Enum):
    available = "available"
    under_offer = "under_offer"
    let = "let"
    sold = "sold"
    off_market = "off_market"


class ActivityType(str, Enum):
    call = "call"
    whatsapp = "whatsapp"
    email = "email"
    meeting = "meeting"
    viewing = "viewing"
    note = "note"


class MatchType(str, Enum):
    suggested = "suggested"
    requested = "requested"
    viewed = "viewed"
    offered = "offered"


class CriterionKind(str, Enum):
    boolean = "boolean"
    threshold = "threshold"


class LeadScoreSort(str, Enum):
    score_desc = "score_desc"
    score_asc = "score_asc"
