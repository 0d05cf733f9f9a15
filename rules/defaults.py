"""
Built-in Rules - The doctor's default script
============================================

Rule and fallback declarations as plain data. Builders in
``rules.loader`` turn them into fresh ``Rule`` objects, so every
responder gets its own rotation cursors.
"""

DEFAULT_RULES = (
    {
        "keyword": "hello",
        "priority": 100,
        "decompositions": [
            {
                "pattern": r"^(hello|hi|hey).*$",
                "responses": [
                    "Hello. What is troubling you?",
                    "Hello. How are you feeling today?",
                ],
            },
        ],
    },
    {
        "keyword": "feel",
        "priority": 80,
        "decompositions": [
            {
                "pattern": r"i feel (.*)",
                "responses": [
                    "Do you often feel $1?",
                    "Tell me more about these feelings.",
                    "What makes you feel $1?",
                ],
            },
        ],
    },
    {
        "keyword": "am",
        "priority": 75,
        "decompositions": [
            {
                "pattern": r"i am (.*)",
                "responses": [
                    "How long have you been $1?",
                    "Why do you say you are $1?",
                    "How do you feel about being $1?",
                ],
            },
        ],
    },
    {
        "keyword": "family",
        "priority": 70,
        "decompositions": [
            {
                "pattern": r"(mother|father|parent|family)",
                "responses": [
                    "Tell me more about your family.",
                    "How do you feel about your $1?",
                ],
            },
        ],
    },
    {
        "keyword": "because",
        "priority": 60,
        "decompositions": [
            {
                "pattern": r"because (.*)",
                "responses": [
                    "Is that the real reason?",
                    "What other reasons come to mind?",
                ],
            },
        ],
    },
    {
        "keyword": "you",
        "priority": 50,
        "decompositions": [
            {
                "pattern": r"you (.*)",
                "responses": [
                    "We are discussing you, not me.",
                    "Why do you say that about me?",
                ],
            },
        ],
    },
)

DEFAULT_FALLBACKS = (
    "Please go on.",
    "Tell me more.",
    "Why do you say that?",
    "I see.",
)
