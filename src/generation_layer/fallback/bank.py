"""
Canned fallback content.

Fixed, schema-valid records served when structured content cannot be
generated. Each ``*_fallback`` function is a FallbackPolicy: pure,
network-free, and returns a fresh copy so callers may mutate the result.
"""

import copy
from typing import Any, Mapping

INSIGHTS_FALLBACK: dict[str, Any] = {
    "salaryRanges": [],
    "growthRate": 0,
    "demandLevel": "MEDIUM",
    "topSkills": [],
    "recommendedSkills": [],
    "marketOutlook": "NEUTRAL",
    "keyTrends": [],
}

QUIZ_FALLBACK_QUESTIONS: list[dict[str, Any]] = [
    {
        "question": "Which HTTP method is idempotent?",
        "options": ["POST", "PUT", "PATCH", "CONNECT"],
        "correctAnswer": "PUT",
        "explanation": "PUT is idempotent by definition; multiple identical requests have the same effect.",
    },
    {
        "question": "What does ACID stand for in databases?",
        "options": [
            "Atomicity, Consistency, Isolation, Durability",
            "Accuracy, Consistency, Integrity, Durability",
            "Atomicity, Concurrency, Isolation, Distribution",
            "Availability, Consistency, Integrity, Durability",
        ],
        "correctAnswer": "Atomicity, Consistency, Isolation, Durability",
        "explanation": "These are the transaction guarantees of relational databases.",
    },
    {
        "question": "Which data structure gives O(1) average-time lookup?",
        "options": ["Array", "Linked List", "Hash Map", "Binary Tree"],
        "correctAnswer": "Hash Map",
        "explanation": "Hash maps provide average O(1) lookup with a good hash function.",
    },
    {
        "question": "What is the purpose of Docker?",
        "options": [
            "Virtualize hardware",
            "Containerize applications",
            "Provision cloud servers",
            "Monitor logs",
        ],
        "correctAnswer": "Containerize applications",
        "explanation": "Docker packages apps and dependencies into containers.",
    },
    {
        "question": "Which of the following is NOT part of the CIA triad?",
        "options": ["Confidentiality", "Integrity", "Availability", "Authenticity"],
        "correctAnswer": "Authenticity",
        "explanation": "CIA stands for Confidentiality, Integrity, Availability.",
    },
    {
        "question": "In JavaScript, which keyword declares a block-scoped variable?",
        "options": ["var", "let", "function", "const"],
        "correctAnswer": "let",
        "explanation": "Both let and const are block-scoped; let is commonly used for mutable variables.",
    },
    {
        "question": "Which index type is best for range queries?",
        "options": ["Hash index", "B-Tree index", "Bitmap index", "Full-text index"],
        "correctAnswer": "B-Tree index",
        "explanation": "B-Trees support ordered traversal and ranges efficiently.",
    },
    {
        "question": "What does REST stand for?",
        "options": [
            "Representational State Transfer",
            "Remote Execution Service Transport",
            "Reliable Event Streaming Transport",
            "Resource Endpoint Standard Transfer",
        ],
        "correctAnswer": "Representational State Transfer",
        "explanation": "REST is an architectural style for web services.",
    },
    {
        "question": "In Git, which command creates a new branch and switches to it?",
        "options": ["git checkout -b", "git switch", "git branch -c", "git new"],
        "correctAnswer": "git checkout -b",
        "explanation": "'git checkout -b <name>' creates and checks out the branch (or use 'git switch -c').",
    },
    {
        "question": "Which algorithm is used by TLS for key exchange by default?",
        "options": ["RSA", "Diffie-Hellman", "AES", "SHA-256"],
        "correctAnswer": "Diffie-Hellman",
        "explanation": "TLS commonly uses (Elliptic Curve) Diffie-Hellman for key exchange.",
    },
]

IMPROVEMENT_TIP_FALLBACK = (
    "Keep building your {industry} fundamentals: review the core concepts behind "
    "each topic and practice explaining them out loud. Steady, focused practice "
    "will make the next interview feel much easier."
)


def insights_fallback(key: str, context: Mapping[str, str]) -> dict[str, Any]:
    """Neutral, empty market picture."""
    return copy.deepcopy(INSIGHTS_FALLBACK)


def quiz_fallback(key: str, context: Mapping[str, str]) -> dict[str, Any]:
    """The ten canned general technical questions."""
    return {"questions": copy.deepcopy(QUIZ_FALLBACK_QUESTIONS)}


def improvement_tip_fallback(key: str, context: Mapping[str, str]) -> str:
    industry = (context.get("industry") or "").strip() or "technical"
    return IMPROVEMENT_TIP_FALLBACK.format(industry=industry)
