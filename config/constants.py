"""Application constants."""

# Singleton document ids
DEFAULT_SETTINGS_ID = "default"

# Payment methods
COD_PAYMENT_METHOD = "COD (Cash on Delivery)"
BANK_TRANSFER_METHOD = "Bank Transfer"

# COD defaults
DEFAULT_COD_SURCHARGE = 250
DEFAULT_COD_DESCRIPTION = "Biaya tambahan untuk pembayaran COD (Cash on Delivery)"

# Affiliate program defaults
DEFAULT_COMMISSION_RATE = 5  # percent
DEFAULT_MIN_PAYOUT_AMOUNT = 5000
DEFAULT_PAYOUT_METHODS = [BANK_TRANSFER_METHOD]
DEFAULT_TERMS = "Default terms and conditions for the affiliate program."

# Referral statuses
REFERRAL_CLICKED = "clicked"
REFERRAL_REGISTERED = "registered"
REFERRAL_ORDERED = "ordered"
REFERRAL_APPROVED = "approved"
REFERRAL_REJECTED = "rejected"
REFERRAL_PURCHASED = "purchased"

# Every referral that reached at least the click stage
CLICK_STATUSES = frozenset({
    REFERRAL_CLICKED,
    REFERRAL_REGISTERED,
    REFERRAL_ORDERED,
    REFERRAL_APPROVED,
})
# Referrals that converted past the click
CONVERTED_STATUSES = frozenset({
    REFERRAL_REGISTERED,
    REFERRAL_ORDERED,
    REFERRAL_APPROVED,
})
FOLLOWER_STATUSES = CONVERTED_STATUSES | {REFERRAL_PURCHASED}

# Commission statuses
COMMISSION_PENDING = "pending"
COMMISSION_APPROVED = "approved"
COMMISSION_PAID = "paid"
COMMISSION_REJECTED = "rejected"

# Payout statuses
PAYOUT_PENDING = "pending"
PAYOUT_PROCESSING = "processing"
PAYOUT_COMPLETED = "completed"
PAYOUT_PAID = "paid"
PAYOUT_REJECTED = "rejected"

# Referral code
REFERRAL_CODE_PREFIX_LEN = 3
REFERRAL_CODE_RANDOM_LEN = 3
REFERRAL_CODE_SUFFIX_LEN = 4
