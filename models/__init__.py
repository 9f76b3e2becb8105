from .db import db
from .gym import GymOwner, Gym, GymLocation, GymStaff
from .user import User
from .gym_class import GymClass
from .booking import Booking
from .payment import Payment
from .subscription import SubscriptionPlan, Subscription, SubscriptionPayment
from .audit_log import AuditLog
