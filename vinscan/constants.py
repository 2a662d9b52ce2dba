"""
Fixed vocabularies shared by schemas and services.
"""

# Asset categories accepted on create/update
ASSET_CATEGORY_CASH = "Cash"
ASSET_CATEGORY_BANK = "Bank"
ASSET_CATEGORY_EWALLET = "E-Wallet"

ASSET_CATEGORIES = (
    ASSET_CATEGORY_CASH,
    ASSET_CATEGORY_BANK,
    ASSET_CATEGORY_EWALLET,
)

# Record types
RECORD_EXPENSE = "Expense"
RECORD_INCOME = "Income"
RECORD_TRANSFER = "Transfer"

RECORD_TYPES = (RECORD_EXPENSE, RECORD_INCOME, RECORD_TRANSFER)

# Suggested labels for the free-text category of Expense/Income records.
# Not enforced; clients show them as presets.
EXPENSE_CATEGORIES = (
    "Makanan",
    "Kehidupan sosial",
    "Transportasi",
    "Kultur",
    "Kebutuhan harian",
    "Pakaian",
    "Kecantikan",
    "Kesehatan",
    "Pendidikan",
    "Hadiah",
    "Lainnya",
)
INCOME_CATEGORIES = ("Uang saku", "Gaji", "Bonus", "Kas kecil", "Lainnya")

# Fee sub-record written alongside a Transfer that carries a fee
FEE_CATEGORY = "Lainnya"
FEE_DESCRIPTION = "Biaya transfer"

MIN_PASSWORD_LENGTH = 6
