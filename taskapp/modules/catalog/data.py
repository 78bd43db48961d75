"""Built-in catalog loaded into the Tasks table by scripts/seed_tasks.py."""

STATIC_TASKS = [
    {"description": "Take a 20 minute walk without your phone", "category": "wellness", "difficulty": "easy"},
    {"description": "Drink eight glasses of water today", "category": "wellness", "difficulty": "easy"},
    {"description": "Write a handwritten note to a friend", "category": "social", "difficulty": "easy"},
    {"description": "Cook a meal you have never made before", "category": "cooking", "difficulty": "medium"},
    {"description": "Declutter one drawer or shelf", "category": "busywork", "difficulty": "easy"},
    {"description": "Learn ten words in a new language", "category": "education", "difficulty": "medium"},
    {"description": "Do 50 push-ups spread over the day", "category": "fitness", "difficulty": "medium"},
    {"description": "Call a relative you have not spoken to in a month", "category": "social", "difficulty": "easy"},
    {"description": "Read one chapter of a non-fiction book", "category": "education", "difficulty": "easy"},
    {"description": "Sketch something you can see from your window", "category": "creative", "difficulty": "medium"},
    {"description": "Volunteer an hour at a local organization", "category": "charity", "difficulty": "hard"},
    {"description": "Run 5 kilometres", "category": "fitness", "difficulty": "hard"},
    {"description": "Go a full day without social media", "category": "wellness", "difficulty": "hard"},
    {"description": "Plant something and photograph it", "category": "diy", "difficulty": "medium"},
    {"description": "Fix something at home that has been broken for a while", "category": "diy", "difficulty": "hard"},
]
