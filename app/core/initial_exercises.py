"""
Starter exercise library, all approved.
"""

INITIAL_EXERCISES = [
    {
        "name": "Push-ups",
        "description": "Classic upper body exercise",
        "category": "strength",
        "muscle_groups": ["chest", "arms", "core"],
        "equipment": ["none"],
        "difficulty": "beginner",
        "instructions": ["Start in plank position", "Lower body until chest nearly touches floor", "Push back up"],
        "calories": 8,
        "tips": ["Keep core engaged", "Maintain straight line from head to heels"],
    },
    {
        "name": "Squats",
        "description": "Fundamental lower body exercise",
        "category": "strength",
        "muscle_groups": ["legs", "glutes", "core"],
        "equipment": ["none"],
        "difficulty": "beginner",
        "instructions": ["Stand with feet shoulder-width apart", "Lower hips back and down", "Return to standing"],
        "calories": 10,
        "tips": ["Keep knees aligned with toes", "Chest up, core tight"],
    },
    {
        "name": "Burpees",
        "description": "Full body cardio exercise",
        "category": "cardio",
        "muscle_groups": ["full-body"],
        "equipment": ["none"],
        "difficulty": "intermediate",
        "instructions": [
            "Start standing",
            "Drop to plank",
            "Do a push-up",
            "Jump feet to hands",
            "Jump up with arms overhead",
        ],
        "calories": 12,
        "tips": ["Move explosively", "Land softly"],
    },
    {
        "name": "Plank",
        "description": "Core strengthening hold",
        "category": "strength",
        "muscle_groups": ["core", "shoulders"],
        "equipment": ["none"],
        "difficulty": "beginner",
        "instructions": ["Hold push-up position on forearms", "Keep body in straight line", "Hold for time"],
        "calories": 5,
        "tips": ["Don't let hips sag", "Breathe steadily"],
    },
    {
        "name": "Jumping Jacks",
        "description": "Classic cardio warm-up",
        "category": "cardio",
        "muscle_groups": ["full-body"],
        "equipment": ["none"],
        "difficulty": "beginner",
        "instructions": ["Start with feet together", "Jump feet out while raising arms", "Return to start"],
        "calories": 8,
        "tips": ["Land softly", "Keep pace steady"],
    },
]
