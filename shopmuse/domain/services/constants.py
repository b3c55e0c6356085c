# Storage keys (JSON documents in the key-value store)
KEY_RECENT_SEARCHES = "recentSearches"
KEY_INTERACTIONS = "userInteractions"
KEY_USER_CONTEXT = "userContext"
KEY_USER_PROFILE = "userProfile"
KEY_BUDGET_PLANS = "budgetPlans"    # suffixed with :<user_id>
KEY_STOCK_ALERTS = "stockAlerts"    # suffixed with :<user_id>

# Caps on persisted lists
MAX_RECENT_SEARCHES = 5
MAX_PROFILE_CATEGORIES = 10
MAX_COMMON_KEYWORDS = 50
MAX_CONTEXT_VIEWED = 50
MAX_CONTEXT_SEARCHES = 20

# Local recommendation scoring
DEFAULT_AVG_PRICE = 15000.0
PRICE_BAND_LOW = 0.5
PRICE_BAND_HIGH = 1.5
PRICE_PROXIMITY = 0.3
POPULAR_TAGS = frozenset({"premium", "wireless", "smart", "fitness", "healthy"})

SCORE_BASE, SCORE_MIN, SCORE_MAX = 50, 50, 100
SCORE_CATEGORY_BONUS = 20
SCORE_PRICE_BONUS = 15
SCORE_TAG_BONUS = 10
SCORE_JITTER = 15

CONFIDENCE_BASE, CONFIDENCE_MIN, CONFIDENCE_MAX = 60, 60, 100
CONFIDENCE_CATEGORY_BONUS = 15
CONFIDENCE_PRICE_BONUS = 10
CONFIDENCE_TAG_BONUS = 8
CONFIDENCE_JITTER = 12

# Provider results are ranked 95, 90, 85...
PROVIDER_TOP_SCORE = 95
PROVIDER_SCORE_STEP = 5

# Budget alert thresholds (share of allocation used)
BUDGET_OVERSPEND = 1.0
BUDGET_NEAR_LIMIT = 0.8
BUDGET_INSIGHT_UTILIZATION = 0.8

# Probability that a stock alert fires on a check
STOCK_ALERT_TRIGGER = {
    "back_in_stock": 0.20,
    "low_stock": 0.30,
    "price_drop": 0.15,
    "deal_alert": 0.10,
}

# Price prediction
SEASONAL_FACTORS = (
    -0.10, -0.05, 0.05, 0.10, 0.05, 0.00,  # Jan-Jun
    -0.05, -0.10, 0.05, 0.10, 0.15, 0.20,  # Jul-Dec
)
TREND_WEIGHT = 0.6
SEASONAL_WEIGHT = 0.3
NOISE_WEIGHT = 0.1
NOISE_OFFSET = 0.05
VOLATILITY_MIN, VOLATILITY_MAX = 0.5, 2.0
PRICE_ALERT_MIN_CONFIDENCE = 0.7

# Personality thresholds
BARGAIN_AOV = 5000
EXPLORER_CATEGORIES = 5
RESEARCHER_KEYWORDS = 20
BRAND_LOYAL_BRANDS = 3
