"""
Delete every money goal and contribution (categories and ledger are kept)
"""
from church_admin.infrastructure.db.models import MoneyGoal, MoneyGoalContribution
from church_admin.infrastructure.db.session import get_db

db = next(get_db())

print("=== CLEAR MONEY GOALS ===")

deleted_contributions = db.query(MoneyGoalContribution).delete()
print(f"✓ Deleted contributions: {deleted_contributions}")

deleted_goals = db.query(MoneyGoal).delete()
print(f"✓ Deleted goals: {deleted_goals}")

db.commit()
print("\n✓ Done")

db.close()
