"""Application constants."""

USER_AGENT = "territory-rules/0.3 (+territory-map; contact: configured-email)"

LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

DEFAULT_PALETTE = (
    "#4e79a7",
    "#f28e2b",
    "#e15759",
    "#76b7b2",
    "#59a14f",
    "#edc948",
    "#b07aa1",
    "#ff9da7",
    "#9c755f",
    "#bab0ab",
)
UNMATCHED_COLOR = "#dddddd"
FALLBACK_COLOR = "#cccccc"
BASE_FILL_COLOR = "#cccccc"
NORMAL_OPACITY = 0.68
DIMMED_OPACITY = 0.28
CODE_PROPERTY = "name"
POPUP_MAX_TOKENS = 10
FALLBACK_AREAS = ("E", "EC", "N", "NW", "SE", "SW", "W", "WC")

STATUS_AVAILABLE = "available"
STATUS_TAKEN = "taken"
KNOWN_STATUSES = (STATUS_AVAILABLE, STATUS_TAKEN)

REQUIRED_FIELDS = ("id", "tokens")
HEADER_ALIASES = {
    "id": ("territory_id", "id"),
    "tokens": ("postcode_prefixes", "postcodes", "prefixes"),
    "region": ("region",),
    "population": ("estimated_population", "population", "pop"),
    "business_count": ("indicative_business_count", "businesses", "biz", "business_count"),
    "income": ("average_household_income", "income", "avg_income"),
    "status": ("status",),
}
CANDIDATE_DELIMITERS = (",", ";", "\t")

COMMANDS = ("classify", "describe", "style", "inspect")
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "stage",
    "territory",
    "row",
    "event",
    "status",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
