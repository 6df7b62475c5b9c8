from enum import Enum


class RewardTier(str, Enum):
    """Loyalty tiers, lowest first"""
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class LoyaltyAction(str, Enum):
    """Ledger actions that earn or spend points"""
    SIGN_UP = "sign_up"
    PLACE_ORDER = "place_order"
    REVIEW = "review"
    REFERRAL = "referral"
    BIRTHDAY = "birthday"
    STREAK = "streak"
    CHALLENGE_COMPLETED = "challenge_completed"
    REWARD_REDEEMED = "reward_redeemed"
