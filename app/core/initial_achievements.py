"""
Default achievement catalog.
Loaded by the admin seed endpoint; existing rows are matched by name.
"""

INITIAL_ACHIEVEMENTS = [
    {
        "name": "First Step",
        "description": "Complete your first workout",
        "icon": "🏃",
        "category": "workout",
        "points": 10,
        "tier": "bronze",
        "criteria_type": "workout_count",
        "criteria_target": 1,
    },
    {
        "name": "Dedication",
        "description": "Complete 10 workouts",
        "icon": "💪",
        "category": "workout",
        "points": 50,
        "tier": "silver",
        "criteria_type": "workout_count",
        "criteria_target": 10,
    },
    {
        "name": "Champion",
        "description": "Complete 50 workouts",
        "icon": "🏆",
        "category": "workout",
        "points": 200,
        "tier": "gold",
        "criteria_type": "workout_count",
        "criteria_target": 50,
    },
    {
        "name": "Calorie Crusher",
        "description": "Burn 10,000 calories total",
        "icon": "🔥",
        "category": "milestone",
        "points": 100,
        "tier": "silver",
        "criteria_type": "calories_burned",
        "criteria_target": 10000,
    },
    {
        "name": "Class Regular",
        "description": "Attend 20 fitness classes",
        "icon": "📚",
        "category": "attendance",
        "points": 80,
        "tier": "silver",
        "criteria_type": "class_attendance",
        "criteria_target": 20,
    },
    {
        "name": "Marathon",
        "description": "Complete 1000 minutes of workouts",
        "icon": "⏱️",
        "category": "milestone",
        "points": 150,
        "tier": "gold",
        "criteria_type": "duration",
        "criteria_target": 1000,
    },
]
