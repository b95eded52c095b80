"""
Database models package
"""
from market_warrior.models.enrollment import Enrollment
from market_warrior.models.day_progress import DayProgress
from market_warrior.models.quiz_attempt import QuizAttempt
from market_warrior.models.course_content import CourseContent
from market_warrior.models.task_submission import TaskSubmission
from market_warrior.models.certificate import Certificate
from market_warrior.models.payment import Payment
from market_warrior.models.promo_code import PromoCode
from market_warrior.models.affiliate import Affiliate, Referral
from market_warrior.models.live_feed import LiveFeedItem
from market_warrior.models.email_campaign import EmailCampaign
from market_warrior.models.site_setting import SiteSetting
from market_warrior.models.activity_log import ActivityLog
from market_warrior.models.journal import JournalLead, JournalTrade

__all__ = [
    "Enrollment", "DayProgress", "QuizAttempt", "CourseContent",
    "TaskSubmission", "Certificate", "Payment", "PromoCode", "Affiliate",
    "Referral", "LiveFeedItem", "EmailCampaign", "SiteSetting",
    "ActivityLog", "JournalLead", "JournalTrade",
]
