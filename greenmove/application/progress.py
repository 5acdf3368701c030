"""Use cases: level progress and impact summary for display."""
from greenmove.application.ledger import UserLedger
from greenmove.domain import leveling


def get_progress(ledger: UserLedger, user_id: str) -> dict:
    """Returns current level progression state."""
    user = ledger.get(user_id)
    result = leveling.progress(user.level, user.total_points)
    result["total_carbon_saved"] = user.total_carbon_saved
    result["rewards_unlocked"] = len(ledger.repository.list_rewards(user_id))
    return result


def summarize_impact(ledger: UserLedger, user_id: str) -> dict:
    """Carbon and activity counts broken down by category and by type."""
    ledger.get(user_id)
    activities = ledger.repository.list_activities(user_id)

    by_category: dict = {}
    by_type: dict = {}
    for a in activities:
        entry = by_category.setdefault(a.category, {"carbon_saved": 0.0, "count": 0})
        entry["carbon_saved"] += a.carbon_saved
        entry["count"] += 1
        by_type[a.activity_type] = by_type.get(a.activity_type, 0) + 1

    total = sum(a.carbon_saved for a in activities)
    return {
        "total_activities": len(activities),
        "total_carbon_saved": total,
        "average_carbon_per_activity": total / len(activities) if activities else 0.0,
        "by_category": [
            {"name": name, "carbon_saved": v["carbon_saved"], "count": v["count"]}
            for name, v in by_category.items()
        ],
        "by_type": [{"name": name, "count": count} for name, count in by_type.items()],
    }
