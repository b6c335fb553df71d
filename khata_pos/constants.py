# khata_pos/constants.py
"""
Fixed business constants. Anything an operator can change at runtime
(admin PIN, technician code, no-bill-no-exit) lives in AppState.settings.
"""

APP_NAME = "Sangli Refrigeration POS"
SHOP_NAME = "Sangli Refrigeration & Spares"
SHOP_TAGLINE = "Original Spare Parts & Professional Services"
SHOP_GSTIN = "27ABCDE1234F1Z5"
SHOP_MOBILE = "+91 98765 43210"

DATA_DIR = "data"
LOG_DIR = "logs"
TEMPLATES_DIR = "resources/templates"
STYLE_FILE = "resources/styles/app.qss"

BACKUP_VERSION = "1.0"
BACKUP_NOTE = "Sangli POS Full Backup"

# ---- defaults for runtime settings ----
DEFAULT_ADMIN_PIN = "1234"
DEFAULT_TECH_CODE = "TECH"
CUST_CODE = "CUST"

# ---- pricing / billing ----
TAX_RATE = 0.18
MANUAL_CODE = "A"
PROMO_CODES = {
    "SANGLI10": ("percent", 10.0, "Promo Discount (10%)"),
    "DISCOUNT50": ("fixed", 50.0, "Flat ₹50 Off"),
}
SPLIT_TOLERANCE = 1.0
VOID_ALERT_THRESHOLD = 2000.0
WALK_IN_CUSTOMER = "Walk-in Customer"

# ---- enumerations ----
MACHINE_TYPES = ("AC", "Fridge", "Washing Machine")
PAYMENT_METHODS = ("Cash", "Online", "Khata")
KHATA = "Khata"
SPLIT = "Split"
BILL_TYPES = ("Final", "Estimate")
STOCK_REASONS = (
    "Breakage",
    "Lost",
    "Free Replacement",
    "Sample Given",
    "Audit Correction",
    "New Stock",
    "Return Restock",
)
RETURN_REASONS = (
    "Wrong Part Purchased",
    "Defective Part",
    "Customer Changed Mind",
    "Warranty Replacement",
)
PRICE_FIELDS = ("Purchase", "Technician", "Customer")
SECURITY_EVENT_TYPES = ("VOID_BILL", "PRICE_CHECK", "STOCK_EDIT", "SAFE_MODE")
SEVERITIES = ("low", "medium", "high")

# ---- Khata ----
DEFAULT_CREDIT_LIMIT = 5000.0
TRUST_RELIABLE = "Reliable"
TRUST_AVERAGE = "Average"
TRUST_RISKY = "Risky"

# ---- inventory ----
DEFAULT_LOW_STOCK_THRESHOLD = 5
DEAD_STOCK_WARNING_DAYS = 90
DEAD_STOCK_CRITICAL_DAYS = 180

# ---- scanner ----
SCAN_DEBOUNCE_SECONDS = 2.0
SCAN_POLL_INTERVAL_MS = 500
