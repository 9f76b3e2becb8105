import json

from models import db
from models.subscription import SubscriptionPlan

DEFAULT_PLANS = [
    {
        "name": "Basic",
        "code": "basic",
        "description": "Everything a single gym needs to get started",
        "monthly_price": 15000,
        "annual_price": 150000,
        "max_gyms": 1,
        "max_users_per_gym": 50,
        "max_classes_per_month": 100,
        "features": [
            "Up to 50 users per gym",
            "Up to 100 classes per month",
            "Basic booking system",
            "Admin dashboard",
            "Email support",
        ],
    },
    {
        "name": "Pro",
        "code": "pro",
        "description": "For growing gyms",
        "monthly_price": 25000,
        "annual_price": 250000,
        "max_gyms": 3,
        "max_users_per_gym": 150,
        "max_classes_per_month": 300,
        "features": [
            "Up to 3 gym locations",
            "Up to 150 users per gym",
            "Up to 300 classes per month",
            "Advanced booking system",
            "Reports and analytics",
            "Payment integration",
            "Priority support",
        ],
    },
    {
        "name": "Premium",
        "code": "premium",
        "description": "For gym chains",
        "monthly_price": 45000,
        "annual_price": 450000,
        "max_gyms": 10,
        "max_users_per_gym": 500,
        "max_classes_per_month": 1000,
        "features": [
            "Up to 10 gym locations",
            "Up to 500 users per gym",
            "Unlimited classes",
            "Premium booking system",
            "Advanced analytics",
            "Custom API",
            "Full payment integration",
            "24/7 support",
        ],
    },
]


def seed_plans():
    """Insert missing default plans (safe & idempotent). Returns the codes added."""
    existing = {p.code for p in SubscriptionPlan.query.all()}
    added = []
    for plan in DEFAULT_PLANS:
        if plan["code"] in existing:
            continue
        fields = dict(plan)
        fields["features_json"] = json.dumps(fields.pop("features"))
        db.session.add(SubscriptionPlan(**fields))
        added.append(plan["code"])
    db.session.commit()
    return added
