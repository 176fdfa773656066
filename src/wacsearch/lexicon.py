"""Default term tables used by query normalization and intent boosting.

These are plain data. Each table is copied into ``SearchConfig`` at
construction time, so a deployment can override any of them from YAML
without touching code.
"""

# Colloquial term -> WAC terminology appended to the query
SYNONYMS: dict[str, list[str]] = {
    # Food
    "puree": ["leftover", "prepared food", "refrigerated", "stored", "forty-eight hours"],
    "baby food": ["leftover", "prepared food", "infant", "refrigerated"],
    "homemade food": ["leftover", "prepared food", "refrigerated"],
    "juice": ["beverage", "drink", "fluid", "nutrition"],
    "choking": ["food", "hazard", "safe", "size", "cut"],
    "milk": ["breast milk", "formula", "refrigerat", "bottle"],
    "throw out": ["discard", "dispose", "hour", "expire"],
    # Sleep
    "nap": ["rest", "sleep", "infant"],
    "naptime": ["sleep", "rest", "crib", "equipment"],
    "nap room": ["sleep", "rest", "crib", "equipment"],
    "blanket": ["bedding", "crib", "sleep", "soft", "infant"],
    "crib": ["sleep", "infant", "safe sleep", "equipment"],
    # Outdoor play
    "playground": ["outdoor", "play space", "play area"],
    "outside": ["outdoor", "play space"],
    "outside time": ["outdoor", "play", "physical activity"],
    # Bathroom and diapering
    "diaper": ["diaper changing", "toileting"],
    "bathroom": ["toilet", "sink", "handwashing", "diaper"],
    "potty": ["toilet", "training", "bathroom"],
    # Illness and injury
    "sick": ["ill", "illness", "symptom", "contagious"],
    "pink eye": ["illness", "contagious", "exclude", "conjunctivitis"],
    "lice": ["illness", "head", "exclude", "contagious"],
    "fever": ["illness", "temperature", "exclude", "sick"],
    "bruise": ["injury", "incident", "report", "harm"],
    "boo boo": ["injury", "first aid", "incident"],
    "owies": ["injury", "first aid", "incident"],
    # Medication
    "medicine": ["medication", "drug"],
    "tylenol": ["medication", "medicine"],
    "melatonin": ["medication", "medicine", "sleep"],
    "epipen": ["medication", "emergency", "allergy"],
    # Immunization
    "shot": ["immunization", "vaccine"],
    "shots": ["immunization", "vaccine"],
    # Staff and ratios
    "ratio": ["staff", "supervision", "children per"],
    "ratios": ["staff", "supervision", "children per", "group size"],
    "teacher": ["staff", "provider", "ratio"],
    "watch": ["supervise", "ratio", "care for"],
    "volunteer": ["staff", "supervision", "background"],
    "work at": ["staff", "qualif", "age", "employ"],
    "fingerprint": ["background check", "criminal history"],
    "fingerprinting": ["background check", "criminal history"],
    # Emergencies
    "fire": ["emergency", "evacuation", "drill", "preparedness"],
    "what do i do": ["procedure", "plan", "emergency", "preparedness"],
    "during a fire": ["evacuation", "drill", "emergency preparedness"],
    "earthquake": ["drill", "emergency", "disaster", "preparedness"],
    "lost child": ["emergency", "missing", "procedure"],
    # Facilities
    "fence": ["barrier", "height", "forty-eight inches", "outdoor", "enclosed"],
    "tall": ["height", "inches", "feet"],
    # Water
    "swimming": ["water activities", "pool"],
    "pool": ["water activities", "swimming"],
    # Temperature
    "warm": ["temperature", "degrees", "fahrenheit"],
    "hot": ["temperature", "degrees"],
    "cold": ["temperature", "degrees", "refrigerat"],
    # Screens
    "tv": ["television", "screen", "video", "media"],
    "screen time": ["television", "video", "electronic media"],
    # Behavior
    "time out": ["discipline", "guidance", "behavior"],
    "timeout": ["discipline", "guidance", "behavior"],
    "yell": ["discipline", "prohibit", "guidance", "behavior"],
    "hitting": ["discipline", "prohibit", "physical", "corporal"],
    "hit": ["discipline", "prohibit", "physical", "corporal"],
    "bite": ["incident", "injury", "behavior"],
    "aggressive": ["behavior", "guidance", "intervention"],
    # Children
    "kids": ["children", "child"],
    "baby": ["infant", "child"],
    "babies": ["infant", "children"],
    "toddler": ["child", "infant", "young"],
    "newborn": ["infant", "child"],
    # Pickup
    "stranger": ["release", "authorized", "parent", "guardian"],
    "pickup": ["release", "authorized", "parent"],
    "pick up": ["release", "authorized", "parent"],
    # Licensing
    "complain": ["report", "enforcement", "violation", "department"],
    "complaint": ["report", "enforcement", "violation"],
    "touring": ["license", "visit", "inspect"],
    # Misc
    "overnight": ["sleep", "night", "care"],
    "schedule": ["routine", "daily", "activity", "program"],
    "safety": ["safe", "hazard", "protect"],
    "safty": ["safe", "hazard", "protect"],
}

# Words typo correction must never rewrite
STOPWORDS: list[str] = [
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "must", "can", "to", "of", "in", "for", "on", "with", "at",
    "by", "from", "about", "into", "through", "during", "before", "after",
    "above", "below", "between", "under", "again", "further", "then", "once",
    "here", "there", "when", "where", "why", "how", "all", "each", "every",
    "both", "few", "more", "most", "other", "some", "such", "no", "nor", "not",
    "only", "own", "same", "so", "than", "too", "very", "just", "also",
    "my", "your", "his", "her", "its", "our", "their", "this", "that", "these",
    "what", "which", "who", "whom", "if", "or", "and", "but", "because",
    "as", "until", "while", "although", "though", "since",
    "i", "you", "he", "she", "it", "we", "they", "me", "him", "them", "us",
    "kid", "kids", "child", "baby", "dog", "cat", "pet", "pets", "rain", "sun",
    "deal", "teddy", "bear", "pool", "swim", "field", "trip", "homework", "help",
    "bring", "take", "put", "get", "give", "make", "go", "come", "see", "know",
    "think", "want", "need", "use", "find", "tell", "ask", "work", "play",
    "try", "leave", "call", "keep", "let", "begin", "seem", "show", "hear",
    "run", "move", "live", "believe", "hold", "happen", "allow", "meet", "pay",
    "send", "expect", "build", "stay", "fall", "cut", "reach", "kill", "remain",
]

# Query phrases that signal a question about durations or time limits
TIME_KEYWORDS: list[str] = [
    "how long", "how many hours", "how many minutes", "time", "duration",
    "expire", "safe for", "keep", "store", "last",
]

# Content words that answer a duration question
TIME_CONTENT_KEYWORDS: list[str] = [
    "hour", "minute", "day", "week", "month", "within", "before", "after", "expire",
]

# Query phrases that signal a question about a quantity
NUMBER_KEYWORDS: list[str] = [
    "how many", "how much", "minimum", "maximum", "at least", "no more than", "limit",
]

# Coarse chunk category -> query substrings that select it
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Food & Nutrition": [
        "food", "eat", "meal", "snack", "bottle", "formula", "milk", "puree", "feed",
        "lunch", "breakfast", "dinner", "refrigerat", "cook",
    ],
    "Health & Safety": [
        "safe", "sick", "ill", "injur", "emergency", "first aid", "medic", "health",
        "sanit", "clean", "wash",
    ],
    "Staffing": ["staff", "ratio", "teacher", "provider", "train", "qualif", "background", "supervis"],
    "Licensing": ["license", "certif", "require", "comply", "regulation", "inspect"],
}
