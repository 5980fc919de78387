"""
Seed the default money goal categories (idempotent: existing names are skipped)
"""
from church_admin.application.money_goal_categories import CreateCategoryUseCase
from church_admin.infrastructure.db.models import MoneyGoalCategory
from church_admin.infrastructure.db.session import get_db

DEFAULT_CATEGORIES = [
    {
        "name": "Money Out Goal",
        "name_fr": "Objectif de Sortie d'Argent",
        "name_mg": "Tanjona Fivoahan'ny Vola",
        "description": "Goals for managing and tracking outgoing expenses",
        "color": "#ef4444",
        "icon": "TrendingDown",
    },
    {
        "name": "Money In Goal",
        "name_fr": "Objectif d'Entrée d'Argent",
        "name_mg": "Tanjona Fidiran'ny Vola",
        "description": "Goals for income generation and revenue targets",
        "color": "#22c55e",
        "icon": "TrendingUp",
    },
    {
        "name": "Economy Goal",
        "name_fr": "Objectif d'Économie",
        "name_mg": "Tanjona Fitsitsiana",
        "description": "Goals for saving money and building reserves",
        "color": "#3b82f6",
        "icon": "PiggyBank",
    },
    {
        "name": "Fun Party Goal",
        "name_fr": "Objectif de Fête",
        "name_mg": "Tanjona Fety",
        "description": "Goals for entertainment, events and celebrations",
        "color": "#8b5cf6",
        "icon": "PartyPopper",
    },
    {
        "name": "Build House Goal",
        "name_fr": "Objectif de Construction de Maison",
        "name_mg": "Tanjona Fanorenana Trano",
        "description": "Goals for construction and property development",
        "color": "#f59e0b",
        "icon": "Home",
    },
    {
        "name": "Education Goal",
        "name_fr": "Objectif d'Éducation",
        "name_mg": "Tanjona Fampianarana",
        "description": "Goals for educational expenses and development",
        "color": "#06b6d4",
        "icon": "GraduationCap",
    },
    {
        "name": "Health Goal",
        "name_fr": "Objectif de Santé",
        "name_mg": "Tanjona Fahasalamana",
        "description": "Goals for healthcare and medical expenses",
        "color": "#10b981",
        "icon": "Heart",
    },
    {
        "name": "Emergency Fund",
        "name_fr": "Fonds d'Urgence",
        "name_mg": "Tahiry ho an'ny Maika",
        "description": "Goals for emergency preparedness and unexpected expenses",
        "color": "#dc2626",
        "icon": "AlertTriangle",
    },
]

db = next(get_db())

print("=== SEED MONEY GOAL CATEGORIES ===")

uc = CreateCategoryUseCase(db)
for data in DEFAULT_CATEGORIES:
    existing = db.query(MoneyGoalCategory).filter(MoneyGoalCategory.name == data["name"]).first()
    if existing:
        print(f"- already exists: {data['name']}")
        continue
    category = uc.execute(**data)
    print(f"✓ created: {category.name} (ID: {category.id})")

db.close()
